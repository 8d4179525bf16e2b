"""
Infrastructure layer.

Concrete matchmaking state, rate limiting, key relay, WebSocket
delivery, shutdown and monitoring components.
"""
