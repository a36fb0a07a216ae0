"""Error types for Mis Compras.

Services raise these instead of HTTP exceptions; the server's exception
handlers translate each class to its status code. The module also maps HTTP
status codes to the user-facing Spanish messages shown by the client.
"""

from __future__ import annotations

from typing import Optional

STATUS_MESSAGES = {
    400: "Datos inválidos. Revisa la información ingresada.",
    401: "Sesión expirada. Por favor inicia sesión nuevamente.",
    403: "No tienes permisos para realizar esta acción.",
    404: "El recurso solicitado no fue encontrado.",
    409: "El registro ya existe o entra en conflicto con otro.",
    422: "Los datos enviados no son válidos.",
    500: "Error interno del servidor. Intenta más tarde.",
    502: "El servidor no está disponible. Intenta más tarde.",
    503: "Servicio no disponible temporalmente. Intenta más tarde.",
}
DEFAULT_ERROR_MESSAGE = "Ocurrió un error inesperado. Intenta nuevamente."


def error_message_for_status(status_code: Optional[int]) -> str:
    """User-facing message for an HTTP status code."""
    if status_code is None:
        return DEFAULT_ERROR_MESSAGE
    return STATUS_MESSAGES.get(status_code, DEFAULT_ERROR_MESSAGE)


class MisComprasError(Exception):
    """Base error for all domain exceptions."""

    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class BusinessRuleError(MisComprasError):
    """Raised when a request is well formed but breaks a workflow or budget rule."""


class NotFoundError(MisComprasError):
    """Raised when a referenced record does not exist."""

    status_code = 404

    def __init__(self, resource: str, resource_id: Optional[str] = None) -> None:
        detail = f"{resource} not found" if resource_id is None else f"{resource} {resource_id} not found"
        super().__init__(detail)
        self.resource = resource
        self.resource_id = resource_id


class PermissionDeniedError(MisComprasError):
    """Raised when the current user's role or ownership does not allow the action."""

    status_code = 403

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(detail)


class ConflictError(MisComprasError):
    """Raised when a unique value (email, code, name) is already taken."""

    status_code = 409


class AuthenticationError(MisComprasError):
    """Raised for missing, invalid or expired credentials."""

    status_code = 401
