"""
Presentation layer: HTTP and WebSocket endpoints.
"""
