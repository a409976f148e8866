"""
Presentation Layer Base Classes.

The presentation layer handles view composition and formatting.
It transforms domain objects into JSON-ready views and notifications
for whatever front end renders them.

Key principles:
- Views are stateless representations
- No business logic in views
- Consistent theming across use cases
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from .domain import plain_number


class NotificationVariant(Enum):
    """Toast variants understood by the front end."""
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A one-shot message for the user (rendered as a toast)."""
    title: str
    message: str
    variant: NotificationVariant

    @property
    def is_error(self) -> bool:
        return self.variant == NotificationVariant.ERROR

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "message": self.message, "variant": self.variant.value}


@dataclass
class ViewTheme:
    """
    Theme configuration for views.

    Provides consistent styling across all views in a use case.
    """
    # CSS classes for result styles
    style_classes: Dict[str, str] = field(default_factory=lambda: {
        "success": "success-message",
        "hold": "hold-message",
        "error": "error-message",
    })

    # Icons for common elements
    icons: Dict[str, str] = field(default_factory=lambda: {
        "success": "✅",
        "hold": "📞",
        "error": "❌",
    })

    def get_style_class(self, style: str) -> str:
        """Get the CSS class for a result style."""
        return self.style_classes.get(style, "")

    def icon(self, name: str) -> str:
        """Get an icon by name."""
        return self.icons.get(name, "")


# Default theme instance
DEFAULT_THEME = ViewTheme()


class ViewComposer(ABC):
    """
    Abstract base class for view composers.

    A ViewComposer transforms domain data into plain dict views.
    Each use case should have its own composer that knows how to
    present its specific data types.
    """

    def __init__(self, theme: Optional[ViewTheme] = None):
        self.theme = theme or DEFAULT_THEME

    @abstractmethod
    def get_view_builders(self) -> Dict[str, Callable]:
        """
        Return a dictionary of view builder methods.

        Returns:
            Dict mapping view names to builder methods
        """
        pass


class TextFormatter:
    """
    Utility class for formatting text in views.

    Provides consistent formatting for common data types.
    """

    @staticmethod
    def currency(amount: Union[Decimal, float, int], currency: str = "£") -> str:
        """Format a currency amount."""
        return f"{currency}{Decimal(amount):,.2f}"

    @staticmethod
    def date(value: Optional[Union[date, datetime]], format: str = "%Y-%m-%d") -> str:
        """Format a date, or an empty string when there is none."""
        return value.strftime(format) if value else ""

    @staticmethod
    def number(value: Any) -> str:
        """Format a Decimal without exponent noise ("60", "0.3")."""
        return plain_number(value)
