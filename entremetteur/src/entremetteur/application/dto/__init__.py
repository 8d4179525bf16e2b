"""
Data Transfer Objects for Entremetteur application layer.
"""

from entremetteur.application.dto.session_dto import SessionInfo

__all__ = ["SessionInfo"]
