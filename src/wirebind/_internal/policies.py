from enum import Enum


class ExplicitArgumentPolicy(str, Enum):
    """Policy for explicit bind arguments that share one runtime type."""

    ERROR = "error"
    """Raise an error when more than one explicit argument matches a parameter."""

    FIRST_MATCH = "first_match"
    """Bind the earliest matching explicit argument in call order."""
