"""
Application use cases for Entremetteur.
"""

from entremetteur.application.use_cases.coordinate_session import (
    SessionCoordinator,
)
from entremetteur.application.use_cases.message_validation import (
    ValidateMessageUseCase,
    ValidationResult,
)

__all__ = [
    "SessionCoordinator",
    "ValidateMessageUseCase",
    "ValidationResult",
]
