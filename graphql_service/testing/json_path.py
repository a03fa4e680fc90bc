"""Minimal JSONPath evaluation for GraphQL response documents.

Supports the subset used to address response data:

- ``$`` the document root
- ``.name`` and ``['name']`` object members
- ``[0]`` list indices (negative indices count from the end)
- ``[*]`` and ``.*`` wildcards

A path without wildcards is *definite*: reading it returns one value or
raises ``PathNotFoundError``. A path with a wildcard is *indefinite*: reading
it returns the list of every match and missing branches are skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_NAME = re.compile(r"[^.\[\]]+")
_INDEX = re.compile(r"-?\d+")


class PathNotFoundError(LookupError):
    """Raised when a definite path does not resolve."""


@dataclass(frozen=True)
class _Segment:
    kind: str  # "name", "index" or "wildcard"
    value: Any = None


class JsonPath:
    def __init__(self, expression: str) -> None:
        self.expression = expression
        self._segments = _parse(expression)

    @classmethod
    def compile(cls, expression: str) -> JsonPath:
        return cls(expression)

    @property
    def is_definite(self) -> bool:
        return all(segment.kind != "wildcard" for segment in self._segments)

    def read(self, document: Any) -> Any:
        matches = [document]
        definite = self.is_definite
        for position, segment in enumerate(self._segments):
            next_matches: list[Any] = []
            for value in matches:
                next_matches.extend(self._step(value, segment, position, definite))
            matches = next_matches
        return matches[0] if definite else matches

    def exists(self, document: Any) -> bool:
        """Whether the path resolves (for indefinite paths, to at least one match)."""
        try:
            result = self.read(document)
        except PathNotFoundError:
            return False
        return self.is_definite or bool(result)

    def _step(self, value: Any, segment: _Segment, position: int, definite: bool) -> list[Any]:
        if segment.kind == "wildcard":
            if isinstance(value, dict):
                return list(value.values())
            if isinstance(value, list):
                return list(value)
            return []
        if segment.kind == "name" and isinstance(value, dict) and segment.value in value:
            return [value[segment.value]]
        if segment.kind == "index" and isinstance(value, list):
            if -len(value) <= segment.value < len(value):
                return [value[segment.value]]
        if definite:
            missing = _render(self._segments[: position + 1])
            msg = f"No results for path: {missing}"
            raise PathNotFoundError(msg)
        return []

    def __str__(self) -> str:
        return self.expression

    def __repr__(self) -> str:
        return f"JsonPath({self.expression!r})"


def _parse(expression: str) -> list[_Segment]:
    if not expression.startswith("$"):
        msg = f"JSON path must start with '$': {expression!r}"
        raise ValueError(msg)
    segments: list[_Segment] = []
    pos = 1
    while pos < len(expression):
        char = expression[pos]
        if char == ".":
            pos += 1
            if expression.startswith("*", pos):
                segments.append(_Segment("wildcard"))
                pos += 1
                continue
            match = _NAME.match(expression, pos)
            if match is None:
                msg = f"Expected a member name at position {pos} in {expression!r}"
                raise ValueError(msg)
            segments.append(_Segment("name", match.group()))
            pos = match.end()
        elif char == "[":
            end = expression.find("]", pos)
            if end == -1:
                msg = f"Unclosed '[' in {expression!r}"
                raise ValueError(msg)
            segments.append(_bracket(expression[pos + 1 : end].strip(), expression))
            pos = end + 1
        else:
            msg = f"Unexpected character {char!r} at position {pos} in {expression!r}"
            raise ValueError(msg)
    return segments


def _bracket(content: str, expression: str) -> _Segment:
    if content == "*":
        return _Segment("wildcard")
    if len(content) >= 2 and content[0] == content[-1] and content[0] in "'\"":
        return _Segment("name", content[1:-1])
    if _INDEX.fullmatch(content):
        return _Segment("index", int(content))
    msg = f"Unsupported bracket expression [{content}] in {expression!r}"
    raise ValueError(msg)


def _render(segments: list[_Segment]) -> str:
    parts = ["$"]
    for segment in segments:
        if segment.kind == "name":
            parts.append(f"['{segment.value}']")
        elif segment.kind == "index":
            parts.append(f"[{segment.value}]")
        else:
            parts.append("[*]")
    return "".join(parts)


__all__ = ["JsonPath", "PathNotFoundError"]
