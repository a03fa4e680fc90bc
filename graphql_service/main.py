"""Module entry point: ``python -m graphql_service.main``."""

from graphql_service.cli.main import main

if __name__ == "__main__":
    main()
