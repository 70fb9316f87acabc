"""FastAPI entry point for QuickBox.

Run the API server:
    python -m quickbox.app

Environment variables:
    QUICKBOX_HOST: Interface to bind (default: 0.0.0.0)
    QUICKBOX_PORT: Port to run on (default: 8080)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import api_router
from .config import settings
from .exceptions import DanglingReference, MalformedDocument, PolicyViolation, QuickboxError

logger = logging.getLogger(__name__)

# Most specific first, QuickboxError catches the rest
_STATUS_CODES: list[tuple[type[QuickboxError], int]] = [
    (PolicyViolation, 409),
    (DanglingReference, 404),
    (MalformedDocument, 400),
    (QuickboxError, 400),
]


def _status_for(error: QuickboxError) -> int:
    for error_class, status_code in _STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return 400


async def quickbox_error_handler(request: Request, exc: QuickboxError) -> JSONResponse:
    """Translate engine errors into JSON error responses."""
    status_code = _status_for(exc)
    logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": str(exc), "type": type(exc).__name__},
    )


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Commands applied to the wrong kind of box or with bad arguments."""
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": str(exc), "type": "ValueError"},
    )


def create_api_app() -> FastAPI:
    """Create the FastAPI application serving editor sessions."""
    app = FastAPI(title="QuickBox Mockup Editor API")
    app.add_exception_handler(QuickboxError, quickbox_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.include_router(api_router)
    return app


def main():
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "quickbox.app:create_api_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
    )


if __name__ == "__main__":
    main()
