"""Boundary hardening utilities for the Grove API.

Provides user-friendly error formatting and input validation for the
labels and coordinates that a presentation layer forwards into the
index tree. The tree itself never fails on bad coordinates; these
helpers only reject input that cannot be displayed or addressed at all.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# 1. Error Formatting
# ---------------------------------------------------------------------------


@dataclass
class UserFriendlyError:
    """A structured error designed for end-user consumption.

    Attributes:
        message: Clear description for the user.
        suggestion: Actionable guidance.
        component: Originating subsystem.
        error_code: Machine-readable identifier (e.g. "TREE_002").
        technical_detail: Debugging info for logs only -- never shown to users.
    """

    message: str
    suggestion: str
    component: str
    error_code: str
    technical_detail: str = ""

    def to_dict(self) -> dict[str, str]:
        """Serialize for API responses (excludes technical_detail).

        Returns:
            Dictionary safe for sending to end users.
        """
        return {
            "message": self.message,
            "suggestion": self.suggestion,
            "component": self.component,
            "error_code": self.error_code,
        }


class ErrorFormatter:
    """Convert internal exceptions to user-friendly messages.

    All methods return a ``UserFriendlyError`` and never expose internal
    paths, stack traces, or implementation details to the end user.
    """

    def format_tree_error(self, error: Exception) -> UserFriendlyError:
        """Format an error raised while serving a tree request.

        Args:
            error: The caught exception.

        Returns:
            User-friendly error with actionable suggestion.
        """
        return self._format(error, component="grove", code_prefix="TREE")

    def format_validation_error(self, error: Exception) -> UserFriendlyError:
        """Format an input validation error.

        Args:
            error: The caught exception.

        Returns:
            User-friendly error with actionable suggestion.
        """
        return self._format(error, component="grove", code_prefix="INPUT")

    # ------------------------------------------------------------------

    def _format(
        self,
        error: Exception,
        *,
        component: str,
        code_prefix: str,
    ) -> UserFriendlyError:
        """Shared formatting logic.

        Args:
            error: The caught exception.
            component: Subsystem name.
            code_prefix: Short prefix for error code.

        Returns:
            Structured error with safe user message.
        """
        message, suggestion, code_suffix = _classify_error(error)
        logger.debug("Formatted %s as %s_%s", type(error).__name__, code_prefix, code_suffix)
        return UserFriendlyError(
            message=message,
            suggestion=suggestion,
            component=component,
            error_code=f"{code_prefix}_{code_suffix}",
            technical_detail=repr(error),
        )


def _classify_error(error: Exception) -> tuple[str, str, str]:
    """Map an exception to (message, suggestion, code_suffix).

    Args:
        error: The caught exception.

    Returns:
        Tuple of user message, suggestion text, and error code suffix.
    """
    if isinstance(error, ValidationError):
        return (
            str(error) or "Invalid input was provided.",
            "Correct the highlighted value and try again.",
            "001",
        )
    if isinstance(error, LookupError):
        return (
            "The requested item does not exist.",
            "Positions change after items are added or removed. Refresh the tree and try again.",
            "002",
        )
    if isinstance(error, ValueError):
        return (
            "Invalid input was provided.",
            "Check the input values and try again.",
            "003",
        )
    return (
        "An unexpected error occurred.",
        "If this keeps happening, please report the issue.",
        "999",
    )


# ---------------------------------------------------------------------------
# 2. Input Validation
# ---------------------------------------------------------------------------


class ValidationError(Exception):
    """Raised when input validation fails."""


class InputValidator:
    """Validate inputs at system boundaries.

    All ``validate_*`` methods raise ``ValidationError`` on failure.
    """

    def validate_label(self, value: str, *, max_length: int = 256) -> str:
        """Clean a display label and reject it if nothing is left.

        Control characters and surrounding whitespace are removed and the
        result is truncated. Labels are stored as plain text; escaping for
        display belongs to the presentation layer.

        Args:
            value: Raw label from the presentation layer.
            max_length: Maximum allowed length of the cleaned label.

        Returns:
            Cleaned label.

        Raises:
            ValidationError: If the label is empty after cleaning.
        """
        cleaned = _strip_control_chars(value).strip()[:max_length].rstrip()
        if not cleaned:
            raise ValidationError("Label must not be empty.")
        return cleaned

    def validate_coordinate(self, row: int, col: int) -> tuple[int, int]:
        """Reject coordinates that can never address a node.

        Out-of-range rows and columns are legal here; the tree decides
        what they mean. Only columns below the group marker ``-1`` are
        malformed.

        Args:
            row: Group position.
            col: Leaf position or -1.

        Returns:
            The unchanged ``(row, col)`` pair.

        Raises:
            ValidationError: If *col* is below -1.
        """
        if col < -1:
            raise ValidationError(f"Column {col} is not a valid position.")
        return row, col


def _strip_control_chars(text: str) -> str:
    """Remove ASCII control characters except common whitespace.

    Args:
        text: Input string.

    Returns:
        Cleaned string.
    """
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)
