"""Custom exception hierarchy for the retail assistant."""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    COST_EXCEEDED = "cost_exceeded"
    SYNTAX_ERROR = "syntax_error"
    TIMEOUT = "timeout"
    OTHER = "other"


class RetailAssistantError(Exception):
    """Base exception for all retail assistant errors."""


class GenerationError(RetailAssistantError):
    """Error calling the language model."""


class SchemaUnavailableError(RetailAssistantError):
    """The schema provider could not describe the data backend."""


class QueryExecutionError(RetailAssistantError):
    """Error executing SQL against the data backend."""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.OTHER) -> None:
        super().__init__(message)
        self.category = category


class ConfigurationError(RetailAssistantError):
    """Error in system configuration."""


class InvariantViolation(RetailAssistantError):
    """An internal invariant was broken. Always a defect."""
