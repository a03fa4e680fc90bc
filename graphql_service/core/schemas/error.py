"""RFC 7807 problem detail schema."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetail(BaseModel):
    """Problem Details for HTTP APIs (RFC 7807).

    Extension members (``classification``, ``request_id``, exception
    ``extra`` fields) are added to the serialized dict by the exception
    handlers.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(default="about:blank", description="Problem type identifier")
    title: str = Field(description="Short summary of the problem type")
    status: int = Field(ge=400, le=599, description="HTTP status code")
    detail: str | None = Field(default=None, description="Explanation of this occurrence")
    instance: str | None = Field(default=None, description="URI of this occurrence")
