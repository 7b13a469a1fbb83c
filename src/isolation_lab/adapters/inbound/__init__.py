"""Inbound adapters for the isolation lab.

Inbound adapters handle incoming requests and convert them to engine
commands.

Exports:
    REST API:
        - create_app: Create a FastAPI application
        - run_server: Run the REST API server
        - STATEMENT_ROUTES: URL slug to statement type mapping
"""

from isolation_lab.adapters.inbound.rest_api import (
    STATEMENT_ROUTES,
    StatementResponse,
    create_app,
    run_server,
)

__all__ = [
    "create_app",
    "run_server",
    "StatementResponse",
    "STATEMENT_ROUTES",
]
