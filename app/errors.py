from __future__ import annotations
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base for errors that are turned into a JSON error body."""

    status_code = 500
    code = "error"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"


class ConfigurationError(AppError):
    status_code = 500
    code = "configuration_error"


class UpstreamError(AppError):
    """A provider (payment gateway, e-mail API) answered with a failure."""

    status_code = 502
    code = "upstream_error"

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        upstream_status: Optional[int] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message, code=code)
        self.provider = provider
        self.upstream_status = upstream_status

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["provider"] = self.provider
        if self.upstream_status is not None:
            out["upstream_status"] = self.upstream_status
        return out


class PersistenceWarning(UserWarning):
    """Local write failed after an upstream side effect already happened.

    Only used as a log category; never raised to the caller.
    """
