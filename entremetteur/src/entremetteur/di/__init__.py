"""
Dependency injection for Entremetteur.
"""

from entremetteur.di.container import Container

__all__ = ["Container"]
