"""
Entremetteur - Anonymous one-to-one chat matchmaker

Pairs waiting participants into ephemeral rooms and relays chat events
between the two members of each room.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
