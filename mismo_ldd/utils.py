"""
Utility functions for common patterns across the LDD validators and rules engine.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


class StringUtils:
    """Utility methods for string validation and processing."""

    # Cached regex patterns for performance
    _regex_cache = {
        'numbers_only': re.compile(r'[^0-9]'),
        'newline': re.compile(r'\n'),
    }

    @staticmethod
    def safe_string_check(value: Any) -> bool:
        """
        Standardized presence check.

        Args:
            value: Value to check

        Returns:
            True if value is not None and not empty after stripping whitespace
        """
        return value is not None and str(value).strip() != ''

    @staticmethod
    def extract_numbers_only(value: Any) -> str:
        """
        Extract only numeric characters from value.

        Examples:
            '(555) 555-5555' -> '5555555555'
            '123-45-6789' -> '123456789'
        """
        if value is None:
            return ''
        return StringUtils._regex_cache['numbers_only'].sub('', str(value))

    @staticmethod
    def line_number_at(content: str, offset: int) -> int:
        """1-based line number of a character offset (newlines preceding it + 1)."""
        if offset < 0:
            return 1
        return len(StringUtils._regex_cache['newline'].findall(content, 0, offset)) + 1


class ValidationUtils:
    """Utility methods for numeric conversion patterns."""

    @staticmethod
    def safe_decimal_conversion(value: Any) -> Optional[Decimal]:
        """
        Safely convert value to Decimal.

        Booleans are rejected so True does not silently become 1.

        Returns:
            Decimal value, or None when the value is not numeric
        """
        if value is None or isinstance(value, bool):
            return None
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
        if not result.is_finite():
            return None
        return result

    @staticmethod
    def safe_int_conversion(value: Any) -> Optional[int]:
        """
        Safely convert value to integer, truncating any fractional part.

        Returns:
            Integer value, or None when the value is not numeric
        """
        result = ValidationUtils.safe_decimal_conversion(value)
        if result is None:
            return None
        return int(result)
