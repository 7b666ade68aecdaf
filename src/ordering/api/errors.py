"""HTTP mapping for errors Protean's FastAPI integration does not know about."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import NotAuthorizedError


async def not_authorized_handler(request: Request, exc: NotAuthorizedError) -> JSONResponse:  # noqa: ARG001
    return JSONResponse(status_code=403, content={"error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    """ValidationError → 400 and ObjectNotFoundError → 404 via Protean, NotAuthorizedError → 403."""
    register_exception_handlers(app)
    app.add_exception_handler(NotAuthorizedError, not_authorized_handler)
