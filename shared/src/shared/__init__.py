"""
Shared utilities for Entremetteur services.

Provides the reporter (logging), emoji registry and health check types
used across components.
"""
