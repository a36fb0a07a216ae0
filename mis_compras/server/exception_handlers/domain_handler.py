"""
Domain Exception Handler.

Translates the ``MisComprasError`` hierarchy raised by services into JSON
responses carrying the technical ``detail`` and the user-facing ``message``.
"""

from fastapi import Request
from fastapi.responses import JSONResponse

from mis_compras.core.errors import MisComprasError, error_message_for_status
from mis_compras.core.logging_config import get_logger

logger = get_logger(__name__)


async def domain_exception_handler(request: Request, exc: MisComprasError) -> JSONResponse:
    """
    Build the response for an expected business error.

    Args:
        request: The HTTP request that caused the exception
        exc: The domain error raised by a service or dependency

    Returns:
        JSONResponse with the error's status code
    """
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "message": error_message_for_status(exc.status_code)},
        headers=headers,
    )
