"""
Key exchange relay infrastructure.
"""

from entremetteur.infrastructure.key_exchange.key_relay import KeyExchangeRelay

__all__ = ["KeyExchangeRelay"]
