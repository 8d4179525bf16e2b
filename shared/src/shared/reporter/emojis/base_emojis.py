"""
Base class for emoji registry components.

All category classes inherit from ComponentEmoji so the registry can
introspect them uniformly.
"""

from typing import Dict, List


class ComponentEmoji:
    """
    Base class for component-specific emoji collections.

    Class attributes define emojis as constants; no instances are needed.

    Example:
        >>> class MyEmoji(ComponentEmoji):
        ...     HELLO = "👋"
    """

    @classmethod
    def get_all(cls) -> Dict[str, str]:
        """
        Get all emoji definitions from this category.

        Returns:
            Dictionary mapping emoji name to emoji character
        """
        return {
            name: value
            for name, value in vars(cls).items()
            if not name.startswith("_") and isinstance(value, str)
        }

    @classmethod
    def list_names(cls) -> List[str]:
        """Get list of all emoji names in this category."""
        return sorted(cls.get_all().keys())
