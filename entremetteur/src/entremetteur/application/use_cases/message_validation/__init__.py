"""
Frame validation use cases.
"""

from entremetteur.application.use_cases.message_validation.validate_message import (
    ValidateMessageUseCase,
    ValidationResult,
)

__all__ = [
    "ValidateMessageUseCase",
    "ValidationResult",
]
