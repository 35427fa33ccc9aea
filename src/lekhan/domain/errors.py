from __future__ import annotations

from typing import Any, Dict, Optional


class LekhanError(Exception):
    """Base class for errors raised by the Lekhan engine."""


class ValidationError(LekhanError, ValueError):
    """Malformed input rejected before it reaches generation."""


class GenerationError(LekhanError):
    """The generative backend failed or returned unusable output."""

    def __init__(self, operation: str, message: str, block_type: Optional[str] = None) -> None:
        self.operation = operation
        self.message = message
        self.block_type = block_type
        super().__init__(str(self))

    def __str__(self) -> str:
        label = self.operation
        if self.block_type:
            label = f"{self.operation} ({self.block_type})"
        return f"{label} failed: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "message": self.message,
            "block_type": self.block_type,
        }


class PersistenceWarning(LekhanError, UserWarning):
    """A chat turn could not be stored after the reply was produced."""
