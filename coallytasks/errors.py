"""Error taxonomy for coallytasks.

Every error raised by services and auth carries its HTTP status and knows how
to render its own JSON body; the API layer registers a single handler for
``AppError``.
"""

from typing import Any, Dict, List, Optional

UNAUTHORIZED_MESSAGE = "No autorizado"
TASK_NOT_FOUND_MESSAGE = "La tarea no existe"
TASK_ALREADY_DELETED_MESSAGE = "La tarea ya fue eliminada"
TASK_UPDATE_FAILED_MESSAGE = "Error al actualizar la tarea"
USER_EXISTS_MESSAGE = "Usuario ya existe"
USER_NOT_FOUND_MESSAGE = "Usuario no encontrado"
WRONG_PASSWORD_MESSAGE = "Contraseña incorrecta"


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(AppError):
    """Client-fixable input problem; carries every field violation."""

    status_code = 400

    def __init__(self, violations: List[Any]):
        super().__init__("Validation failed")
        self.violations = list(violations)

    def to_dict(self) -> Dict[str, Any]:
        return {"errors": [v.to_dict() for v in self.violations]}


class Unauthorized(AppError):
    """Missing, malformed, badly signed or expired bearer token."""

    status_code = 401

    def __init__(self):
        super().__init__(UNAUTHORIZED_MESSAGE)


class Conflict(AppError):
    """Duplicate registration. Answered with 400 for client compatibility."""

    status_code = 400


class LoginFailed(AppError):
    """Unknown email or wrong password."""

    status_code = 400


class NotFound(AppError):
    """Resource absent, or not owned by the requester."""

    status_code = 404

    def __init__(self, message: str = TASK_NOT_FOUND_MESSAGE):
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": True, "msg": self.message}


class UpdateFailed(AppError):
    """Update rejected because of a malformed id, bad payload or persistence failure."""

    status_code = 400

    def __init__(self, detail: Optional[str] = None):
        super().__init__(TASK_UPDATE_FAILED_MESSAGE)
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": True, "msg": self.message}
        if self.detail:
            body["data"] = self.detail
        return body


class InternalError(AppError):
    """Unclassified persistence or hashing failure."""

    status_code = 500
