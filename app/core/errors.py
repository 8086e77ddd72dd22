# app/core/errors.py
"""
Erros de domínio levantados pelos services.

Cada erro carrega `code` e `status_code`; o main.py converte para o
envelope JSON padrão {"code", "message", "details"}.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class CoaError(Exception):
    code = "COA_ERROR"
    status_code = 400

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(CoaError):
    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class NotFound(CoaError):
    code = "NOT_FOUND"
    status_code = 404


class Forbidden(CoaError):
    code = "FORBIDDEN"
    status_code = 403


class Inactive(CoaError):
    code = "EVENT_INACTIVE"
    status_code = 409


class InvalidState(CoaError):
    code = "INVALID_STATE"
    status_code = 409


class DependencyFailure(CoaError):
    """Efeito de vários passos que não completou; precisa de reconciliação manual."""

    code = "DEPENDENCY_FAILURE"
    status_code = 500

    def __init__(self, message: str, *, step: Optional[str] = None, partial: bool = False, **extra: Any):
        details: Dict[str, Any] = {"partial": partial}
        if step:
            details["step"] = step
        details.update(extra)
        super().__init__(message, details=details)
        self.step = step
        self.partial = partial
