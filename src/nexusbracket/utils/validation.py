"""Validation utilities for Nexus Bracket.

This module provides reusable validation functions with consistent error handling.
"""

# Nexus Bracket
# Copyright (C) 2025  Nexus Bracket developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from typing import Any, Optional

from nexusbracket.constants import ENTRY_MODES
from nexusbracket.exceptions import (
    BestOfValidationException,
    BracketUrlValidationException,
    NameValidationException,
    ValidationException,
)


class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: Whether the validation passed
        error_message: Human-readable error message if invalid
        sanitized_value: Cleaned/normalized value if valid
    """

    def __init__(
        self,
        is_valid: bool,
        error_message: Optional[str] = None,
        sanitized_value: Any = None,
    ):
        self.is_valid = is_valid
        self.error_message = error_message
        self.sanitized_value = sanitized_value

    def __bool__(self) -> bool:
        """Allow using result in boolean context: if result: ..."""
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return f"ValidationResult(VALID, {self.sanitized_value!r})"
        return f"ValidationResult(INVALID, {self.error_message!r})"


# ========== Best-of Validation ==========


def validate_best_of(best_of: Any) -> ValidationResult:
    """Validate a match length.

    Args:
        best_of: Number of games per match; int or numeric string

    Returns:
        ValidationResult with the value as int when valid

    Example:
        >>> validate_best_of(3).sanitized_value
        3
        >>> bool(validate_best_of(2))
        False
    """
    message = "Best of must be a positive odd number (1, 3, 5, ...)."
    if isinstance(best_of, bool):
        return ValidationResult(is_valid=False, error_message=message)
    try:
        value = int(str(best_of).strip())
    except (TypeError, ValueError):
        return ValidationResult(is_valid=False, error_message=message)

    if value <= 0 or value % 2 == 0:
        return ValidationResult(is_valid=False, error_message=message)
    return ValidationResult(is_valid=True, sanitized_value=value)


def validate_best_of_strict(best_of: Any) -> int:
    """Validate best-of and raise exception if invalid.

    Raises:
        BestOfValidationException: If the value is not a positive odd number
    """
    result = validate_best_of(best_of)
    if not result.is_valid:
        raise BestOfValidationException(result.error_message)
    return result.sanitized_value


# ========== Bracket Link Validation ==========


def validate_bracket_url(url: Optional[str]) -> ValidationResult:
    """Validate an external bracket link.

    Only absolute http and https links are accepted.
    """
    if not url or not url.strip():
        return ValidationResult(
            is_valid=False,
            error_message="Please provide a bracket link.",
        )

    url = url.strip()
    if not url.startswith(("http://", "https://")):
        return ValidationResult(
            is_valid=False,
            error_message="Please provide a valid URL starting with http:// or https://",
        )
    return ValidationResult(is_valid=True, sanitized_value=url)


def validate_bracket_url_strict(url: Optional[str]) -> str:
    result = validate_bracket_url(url)
    if not result.is_valid:
        raise BracketUrlValidationException(result.error_message)
    return result.sanitized_value


# ========== Name Validation ==========


def validate_name(name: Optional[str], what: str = "Name") -> ValidationResult:
    """Validate a required display name (tournament name, IGN, team name)."""
    if not name or not name.strip():
        return ValidationResult(
            is_valid=False,
            error_message=f"{what} is required.",
        )
    return ValidationResult(is_valid=True, sanitized_value=" ".join(name.split()))


def validate_name_strict(name: Optional[str], what: str = "Name") -> str:
    result = validate_name(name, what)
    if not result.is_valid:
        raise NameValidationException(result.error_message)
    return result.sanitized_value


# ========== Entry Mode Validation ==========


def validate_entry_mode(mode: Optional[str]) -> ValidationResult:
    """Validate an entry portal mode ("1v1" or "5v5")."""
    if mode is None:
        return ValidationResult(is_valid=False, error_message="Entry mode is required.")
    mode = mode.strip().lower()
    if mode not in ENTRY_MODES:
        return ValidationResult(
            is_valid=False,
            error_message=f"Unknown entry mode: {mode}. Use one of {', '.join(ENTRY_MODES)}.",
        )
    return ValidationResult(is_valid=True, sanitized_value=mode)


def validate_entry_mode_strict(mode: Optional[str]) -> str:
    result = validate_entry_mode(mode)
    if not result.is_valid:
        raise ValidationException(result.error_message)
    return result.sanitized_value
