"""REST API adapter for the isolation lab.

This module provides a FastAPI-based REST API that plays the input
source and renderer roles over HTTP: it issues commands against a
SimulationEngine and serves its state snapshot and event stream.

Endpoints:
    GET  /health                        - Health check
    GET  /state                         - Rows, sessions and lock table
    GET  /events                        - Event stream, newest first
    POST /sessions/{name}/{statement}   - Issue a statement
    PUT  /sessions/{name}/target        - Change a session's target row
    PUT  /isolation-level               - Change the isolation level
    POST /reset                         - Reset the simulation

Usage:
    from isolation_lab.adapters.inbound.rest_api import create_app
    from isolation_lab.application import SimulationEngine

    app = create_app(SimulationEngine())
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from isolation_lab import __version__
from isolation_lab.application import StatementResult
from isolation_lab.domain.errors import UnknownSession
from isolation_lab.domain.value_objects import IsolationLevel, StatementType
from isolation_lab.ports.inbound import SimulationPort

STATEMENT_ROUTES: dict[str, StatementType] = {
    "begin": StatementType.BEGIN,
    "commit": StatementType.COMMIT,
    "rollback": StatementType.ROLLBACK,
    "select": StatementType.SELECT_PLAIN,
    "select-for-share": StatementType.SELECT_SHARE,
    "select-for-update": StatementType.SELECT_UPDATE,
    "update": StatementType.UPDATE,
}


class RowModel(BaseModel):
    """A products row."""

    id: int
    name: str
    stock: int


class StatementResponse(BaseModel):
    """Response model for an issued statement."""

    session: str = Field(..., description="Issuing session")
    statement: str = Field(..., description="Statement type")
    outcome: str = Field(..., description="ok, blocked, deadlock or rejected")
    row: RowModel | None = Field(None, description="Row read or written, if any")
    message: str = Field("", description="Status or warning message")


class StateResponse(BaseModel):
    """Response model for the engine state snapshot."""

    isolation_level: str
    rows: list[RowModel]
    sessions: dict[str, dict[str, Any]]
    locks: list[dict[str, Any]]


class EventModel(BaseModel):
    """A single engine event."""

    time: str
    source: str
    message: str
    category: str


class TargetRequest(BaseModel):
    """Request model for changing a session's target row."""

    row_id: int = Field(..., ge=1, description="Row the session should target")


class IsolationLevelRequest(BaseModel):
    """Request model for changing the isolation level."""

    level: str = Field(..., description="e.g. READ-COMMITTED or REPEATABLE-READ")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


def _result_to_response(result: StatementResult) -> StatementResponse:
    return StatementResponse(**result.to_dict())


def create_app(engine: SimulationPort) -> FastAPI:
    """Create a FastAPI application for a simulation engine.

    Args:
        engine: The engine to drive.

    Returns:
        A configured FastAPI application.
    """
    app = FastAPI(
        title="Isolation Lab API",
        description="Two-session transaction isolation and row locking simulator",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__)

    @app.get("/state", response_model=StateResponse, tags=["State"])
    async def get_state() -> StateResponse:
        """Current rows, sessions and lock table."""
        return StateResponse(**engine.snapshot().to_dict())

    @app.get("/events", response_model=list[EventModel], tags=["State"])
    async def get_events() -> list[EventModel]:
        """Event stream, newest first."""
        return [EventModel(**event.to_dict()) for event in engine.events()]

    @app.post(
        "/sessions/{name}/{statement}",
        response_model=StatementResponse,
        tags=["Sessions"],
    )
    async def issue_statement(name: str, statement: str) -> StatementResponse:
        """Issue a statement from session A or B."""
        statement_type = STATEMENT_ROUTES.get(statement)
        if statement_type is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown statement: {statement}",
            )
        try:
            result = engine.execute(name, statement_type)
        except UnknownSession as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        return _result_to_response(result)

    @app.put("/sessions/{name}/target", tags=["Sessions"])
    async def set_target(name: str, request: TargetRequest) -> dict[str, Any]:
        """Change the row a session's statements operate on."""
        try:
            changed = engine.set_target_row(name, request.row_id)
        except UnknownSession as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        if not changed:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No row with ID={request.row_id}",
            )
        return {"session": name, "target_id": request.row_id}

    @app.put("/isolation-level", tags=["Configuration"])
    async def set_isolation_level(request: IsolationLevelRequest) -> dict[str, str]:
        """Change the isolation level; refused while a transaction is open."""
        try:
            level = IsolationLevel.parse(request.level)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        if not engine.set_isolation_level(level):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Commit or roll back all active transactions first",
            )
        return {"isolation_level": engine.isolation_level.value}

    @app.post("/reset", tags=["Configuration"])
    async def reset() -> dict[str, str]:
        """Reset rows, sessions and locks; the isolation level is kept."""
        engine.reset()
        return {"isolation_level": engine.isolation_level.value}

    return app


def run_server(
    engine: SimulationPort,
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Run the REST API server.

    Args:
        engine: The simulation engine.
        host: Host to bind to.
        port: Port to bind to.
    """
    import uvicorn

    app = create_app(engine)
    uvicorn.run(app, host=host, port=port)


def main() -> None:
    """Console entry point: wire the engine from config and serve it."""
    from isolation_lab.infrastructure.container import build_container
    from isolation_lab.infrastructure.config import Config, get_config

    container = build_container(get_config(), start_exporters=True)
    config = container.resolve(Config)
    run_server(
        container.resolve(SimulationPort),  # type: ignore[type-abstract]
        host=config.server.host,
        port=config.server.port,
    )


if __name__ == "__main__":
    main()
