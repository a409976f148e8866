"""
Domain Layer Base Classes.

The domain layer contains pure business logic with no external dependencies.
This makes business rules:
- Easy to test (no mocking needed)
- Reusable across different interfaces
- Clear and self-documenting

Example Usage:
    class RefundDecisionPolicy(PolicyEngine):
        def evaluate(self, context: dict) -> RefundDecision:
            # Pure business logic here
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Union
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal


class PolicyEngine(ABC):
    """
    Abstract base class for policy engines.

    A PolicyEngine encapsulates a set of business rules that can be
    evaluated against a context to produce a decision.

    Example:
        class ExperiencePolicy(PolicyEngine):
            def evaluate(self, context: dict) -> Experience:
                if context["days_since_first_activity"] < 100:
                    return Experience.INEXPERIENCED
                return Experience.EXPERIENCED
    """

    @abstractmethod
    def evaluate(self, context: Dict[str, Any]) -> Any:
        """
        Evaluate the policy against the given context.

        Args:
            context: Dictionary containing all data needed for evaluation

        Returns:
            The policy's decision
        """
        pass


class DomainService(ABC):
    """
    Abstract base class for domain services.

    Domain services contain business logic that doesn't belong to a single entity.
    They orchestrate multiple policies and entities to perform complex operations.

    Key principles:
    - No I/O operations (database, network, file)
    - All dependencies passed as parameters
    - Return domain objects, not DTOs
    """

    @abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """
        Execute the domain service operation.

        Implementation should contain pure business logic only.
        """
        pass


@dataclass(frozen=True)
class ValidationError:
    """A validation error with field and message."""
    field: str
    message: str
    code: str = "invalid"


@dataclass(frozen=True)
class ValidationResult:
    """All validation errors found for one piece of input."""
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def fields(self) -> FrozenSet[str]:
        """Names of the fields that failed."""
        return frozenset(e.field for e in self.errors)

    def messages(self) -> List[str]:
        return [f"{e.field}: {e.message}" for e in self.errors]


class Validator(ABC):
    """
    Abstract base class for validators.

    Validators check that data meets business requirements before processing.
    """

    @abstractmethod
    def validate(self, data: Any) -> List[ValidationError]:
        """
        Validate the data and return any errors.

        Args:
            data: The data to validate

        Returns:
            List of ValidationError objects (empty if valid)
        """
        pass

    def is_valid(self, data: Any) -> bool:
        """Check if data is valid."""
        return len(self.validate(data)) == 0


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def as_utc_datetime(value: Union[date, datetime]) -> datetime:
    """Promote a date to midnight UTC and make naive datetimes UTC."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def whole_days_between(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """
    Whole days from start to end, fractional days truncated toward zero.

    Negative when end lies before start.
    """
    delta = as_utc_datetime(end) - as_utc_datetime(start)
    return int(delta / timedelta(days=1))


def parse_date(date_string: Optional[str]) -> Optional[date]:
    """Parse an ISO date or datetime string into a calendar date (UTC)."""
    if not date_string:
        return None
    try:
        if "T" not in date_string and " " not in date_string:
            return date.fromisoformat(date_string)
        if date_string.endswith("Z"):
            parsed = datetime.fromisoformat(date_string[:-1] + "+00:00")
        else:
            parsed = datetime.fromisoformat(date_string)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()
    except (ValueError, TypeError):
        return None


def plain_number(value: Any) -> str:
    """Render a number without exponent or trailing zeros ("60", "0.3")."""
    if isinstance(value, Decimal):
        if not value.is_finite():
            return str(value)
        text = format(value, "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text
    return str(value)
