from __future__ import annotations


class EngineError(Exception):
    """Base for caller-facing outcomes of the authorization engine.

    ``code`` is a stable machine-readable reason (``"not_found"``,
    ``"owner_cannot_leave"`` ...); ``kind`` names the error family the
    transport layers translate into a status.
    """

    kind = "error"

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(code)
        self.code = code
        self.message = message or code.replace("_", " ").capitalize()

    def __str__(self) -> str:
        return self.code


class NotFoundError(EngineError, LookupError):
    kind = "not_found"


class ForbiddenError(EngineError, PermissionError):
    kind = "forbidden"


class ConflictError(EngineError, ValueError):
    kind = "conflict"


class InvalidContentError(EngineError, ValueError):
    kind = "invalid_content"
