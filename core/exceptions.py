"""
API error types.

Every error a route can raise maps to one HTTP status and a stable error code;
main.py renders them as {"error": {"code", "message"}}.
"""
from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class APIException(HTTPException):
    """Base API exception carrying a machine-readable error code."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIException):
    """Athlete, session or flag does not exist (or is soft-deleted)."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND"
        )


class ValidationError(APIException):
    """Value outside an enumerated domain (day status, session type, rule id)."""

    def __init__(self, detail: str, field: Optional[str] = None):
        error_code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=error_code
        )


class UnknownRuleError(ValidationError):
    def __init__(self, rule_id: Optional[str]):
        super().__init__(f"Unknown integrity rule: {rule_id}", field="rule_id")


class ConflictError(APIException):
    """State transition not allowed from the current state."""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )


class SessionLockedError(ConflictError):
    """Sessions locked by the nightly run are part of scored history."""

    def __init__(self, session_id: Any):
        super().__init__(f"Session {session_id} is locked", error_code="SESSION_LOCKED")


class FlagAlreadyResolvedError(ConflictError):
    def __init__(self, flag_id: Any):
        super().__init__(f"Integrity flag {flag_id} is already resolved", error_code="FLAG_RESOLVED")
