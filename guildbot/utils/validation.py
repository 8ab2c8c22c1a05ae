"""
Validation Utilities
Helper functions for validating Discord IDs and user input
"""

import re
from typing import Any, FrozenSet, Optional, Union

# Discord snowflake ID pattern: 17-20 digits
SNOWFLAKE_REGEX = re.compile(r"^[0-9]{17,20}$")

# Zero-width and control characters stripped from command input
_INVISIBLE_CHARS = re.compile(r"[\u0000-\u0008\u000b\u000c\u000e-\u001f\u200b-\u200f\u2060\ufeff]")


class ValidationResult:
    """Result of a validation operation."""

    def __init__(
        self,
        valid: bool,
        error: Optional[str] = None,
        sanitized: Optional[str] = None,
        value: Optional[Any] = None,
    ):
        self.valid = valid
        self.error = error
        self.sanitized = sanitized
        self.value = value

    def __bool__(self) -> bool:
        return self.valid


class ValidationUtils:
    """Utility class for input validation."""

    @staticmethod
    def is_valid_snowflake(id_value: Union[str, int]) -> bool:
        """
        Check if value is a valid Discord snowflake ID.

        Args:
            id_value: ID to validate

        Returns:
            True if valid snowflake
        """
        if isinstance(id_value, bool) or not isinstance(id_value, (str, int)):
            return False
        return bool(SNOWFLAKE_REGEX.match(str(id_value)))

    @staticmethod
    def validate_user_id(user_id: Optional[Union[str, int]]) -> ValidationResult:
        """
        Validate and sanitize a user ID.

        Args:
            user_id: User ID to validate

        Returns:
            ValidationResult with the ID as int in value
        """
        if not user_id:
            return ValidationResult(valid=False, error="User ID is required")

        sanitized = ValidationUtils.sanitize_input(str(user_id))

        if not ValidationUtils.is_valid_snowflake(sanitized):
            return ValidationResult(valid=False, error=f"Invalid user ID format: {user_id}")

        return ValidationResult(valid=True, sanitized=sanitized, value=int(sanitized))

    @staticmethod
    def parse_owner_ids(raw: str) -> FrozenSet[int]:
        """
        Parse a comma separated list of owner IDs.

        Args:
            raw: Value such as "123456789012345678,234567890123456789"

        Returns:
            Set of owner IDs

        Raises:
            ValueError: If any entry is not a valid snowflake
        """
        owner_ids = set()
        for part in raw.split(","):
            if not part.strip():
                continue
            result = ValidationUtils.validate_user_id(part)
            if not result:
                raise ValueError(result.error)
            owner_ids.add(result.value)
        return frozenset(owner_ids)

    @staticmethod
    def sanitize_input(input_value: str) -> str:
        """
        Strip invisible characters and surrounding whitespace.

        Args:
            input_value: Raw user input

        Returns:
            Sanitized string
        """
        if not isinstance(input_value, str):
            return ""
        return _INVISIBLE_CHARS.sub("", input_value).strip()
