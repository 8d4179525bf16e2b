"""
Domain layer.

Entities, value objects, events and exceptions with no framework
dependencies beyond pydantic models for the event catalogue.
"""
