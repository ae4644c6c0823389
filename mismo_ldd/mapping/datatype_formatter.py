"""
Datatype formatting for MISMO element values.

Converts internal business values into the lexical form MISMO expects for each
datatype and reports whether the value is acceptable for that datatype. The two
answers are independent: a Percent of 150 formats to '150.0000' but is not valid,
and an unparseable date is neither formatted nor valid.

Numeric rounding uses Decimal with ROUND_HALF_UP, never float rounding.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, Dict, Optional, Tuple

from ..config.processing_defaults import ValidationDefaults
from ..models import DataType, LDDContract
from ..utils import StringUtils, ValidationUtils


DATE_FORMATS = [
    '%Y-%m-%d',               # 2024-03-15
    '%m/%d/%Y',               # 03/15/2024
    '%Y/%m/%d',               # 2024/03/15
    '%Y-%m-%d %H:%M:%S',      # 2024-03-15 16:26:23
    '%Y-%m-%d %H:%M:%S.%f',   # 2024-03-15 16:26:23.886
    '%m/%d/%Y %H:%M:%S',      # 03/15/2024 16:26:23
    '%m/%d/%Y %I:%M:%S %p',   # 3/15/2024 5:53:20 AM
]


@dataclass(frozen=True)
class FormatResult:
    """Formatted value (None when it cannot be converted) and datatype validity."""
    formatted: Any
    valid: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"formatted": self.formatted, "valid": self.valid}


class DatatypeFormatter:
    """
    Formats and validates single values for the MISMO datatypes of the field mappings.

    Datatypes without a formatter pass through unchanged and are reported valid.
    """

    def __init__(self, contract: LDDContract):
        self.logger = logging.getLogger(__name__)
        self.contract = contract
        self._formatters: Dict[str, Callable[[Any, Dict[str, Any]], Tuple[Any, bool]]] = {
            DataType.AMOUNT.value: lambda v, o: self._format_decimal(v, 2),
            DataType.PERCENT.value: lambda v, o: self._format_decimal(v, 4, 0, ValidationDefaults.PERCENT_MAX),
            DataType.RATE_PERCENT.value: lambda v, o: self._format_decimal(v, 4, 0, ValidationDefaults.RATE_PERCENT_MAX),
            DataType.RATIO.value: lambda v, o: self._format_decimal(v, 4),
            DataType.DATE.value: lambda v, o: self._format_date(v),
            DataType.DATETIME.value: lambda v, o: self._format_datetime(v),
            DataType.INTEGER.value: lambda v, o: self._format_integer(v),
            DataType.COUNT.value: lambda v, o: self._format_count(v),
            DataType.CREDIT_SCORE.value: lambda v, o: self._format_credit_score(v),
            DataType.PHONE.value: lambda v, o: self._format_phone(v),
            DataType.SSN.value: lambda v, o: self._format_digits(v, (9,)),
            DataType.EIN.value: lambda v, o: self._format_digits(v, (9,)),
            DataType.POSTAL_CODE.value: lambda v, o: self._format_digits(v, (5, 9)),
            DataType.STATE_CODE.value: lambda v, o: self._format_state_code(v),
            DataType.STRING.value: self._format_string,
            DataType.YES_NO.value: lambda v, o: self._format_yes_no(v),
        }

    def format_value(self, value: Any, datatype: Optional[str], options: Optional[Dict[str, Any]] = None) -> FormatResult:
        """
        Format one value for its MISMO datatype.

        Args:
            value: Internal value
            datatype: Datatype name (e.g. 'Amount', 'Phone')
            options: Optional settings; 'max_length' applies to String

        Returns:
            FormatResult(formatted, valid). Empty values format to None and are valid,
            except YesNo which always yields 'Y' or 'N'.
        """
        formatter = self._formatters.get(datatype)
        if formatter is None:
            return FormatResult(formatted=value, valid=True)

        if datatype != DataType.YES_NO.value and not StringUtils.safe_string_check(value):
            return FormatResult(formatted=None, valid=True)

        formatted, valid = formatter(value, options or {})
        if not valid:
            self.logger.debug(f"Value is not a valid {datatype}")
        return FormatResult(formatted=formatted, valid=valid)

    @staticmethod
    def _format_decimal(value: Any, places: int, minimum: Optional[int] = None,
                        maximum: Optional[int] = None) -> Tuple[Optional[str], bool]:
        number = ValidationUtils.safe_decimal_conversion(value)
        if number is None:
            return None, False
        try:
            formatted = str(number.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))
        except InvalidOperation:
            # More significant digits than the Decimal context holds
            return None, False
        in_range = (minimum is None or number >= minimum) and (maximum is None or number <= maximum)
        return formatted, in_range

    @staticmethod
    def _bounded_decimal(value: Any) -> Optional[Decimal]:
        """Decimal conversion that also rejects magnitudes beyond NUMERIC_MAX_DIGITS integer digits."""
        number = ValidationUtils.safe_decimal_conversion(value)
        if number is None or number.adjusted() >= ValidationDefaults.NUMERIC_MAX_DIGITS:
            return None
        return number

    @classmethod
    def _bounded_int(cls, value: Any) -> Optional[int]:
        number = cls._bounded_decimal(value)
        return None if number is None else int(number)

    @classmethod
    def _format_integer(cls, value: Any) -> Tuple[Optional[str], bool]:
        number = cls._bounded_decimal(value)
        if number is None:
            return None, False
        return str(int(number)), number == number.to_integral_value()

    @classmethod
    def _format_count(cls, value: Any) -> Tuple[Optional[str], bool]:
        number = cls._bounded_int(value)
        if number is None or number < 0:
            return None, False
        return str(number), True

    @classmethod
    def _format_credit_score(cls, value: Any) -> Tuple[Optional[str], bool]:
        score = cls._bounded_int(value)
        if score is None or not ValidationDefaults.CREDIT_SCORE_MIN <= score <= ValidationDefaults.CREDIT_SCORE_MAX:
            return None, False
        return str(score), True

    @staticmethod
    def _format_phone(value: Any) -> Tuple[Optional[str], bool]:
        digits = StringUtils.extract_numbers_only(value)
        # Strip the North American country code
        if len(digits) == 11 and digits.startswith('1'):
            return digits[1:], True
        if len(digits) == 10:
            return digits, True
        return None, False

    @staticmethod
    def _format_digits(value: Any, lengths: Tuple[int, ...]) -> Tuple[Optional[str], bool]:
        digits = StringUtils.extract_numbers_only(value)
        if len(digits) in lengths:
            return digits, True
        return None, False

    def _format_state_code(self, value: Any) -> Tuple[Optional[str], bool]:
        code = str(value).strip().upper()
        if code in self.contract.enum_maps['StateType'].mismo_values:
            return code, True
        return None, False

    @staticmethod
    def _format_string(value: Any, options: Dict[str, Any]) -> Tuple[Optional[str], bool]:
        max_length = options.get('max_length')
        if max_length is None:
            max_length = options.get('maxLength')
        if max_length is None:
            max_length = ValidationDefaults.STRING_MAX_LENGTH

        limit = ValidationUtils.safe_int_conversion(max_length)
        if limit is None or limit < 0:
            return None, False
        return str(value).strip()[:limit], True

    def _format_yes_no(self, value: Any) -> Tuple[str, bool]:
        yes_no = self.contract.enum_maps['YesNoType']
        if yes_no.is_mismo_value(value):
            return value, True
        return yes_no.translate(value) or ('Y' if value else 'N'), True

    @staticmethod
    def _parse_datetime(value: Any) -> Optional[datetime]:
        """Parse a date/datetime value; naive results are treated as UTC."""
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime(value.year, value.month, value.day)
        else:
            text = str(value).strip()
            parsed = None
            for fmt in DATE_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            if parsed is None:
                try:
                    parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
                except ValueError:
                    return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        try:
            return parsed.astimezone(timezone.utc)
        except OverflowError:
            # Offset pushes the instant outside datetime's year range
            return None

    def _format_date(self, value: Any) -> Tuple[Optional[str], bool]:
        parsed = self._parse_datetime(value)
        if parsed is None:
            return None, False
        return parsed.date().isoformat(), True

    def _format_datetime(self, value: Any) -> Tuple[Optional[str], bool]:
        parsed = self._parse_datetime(value)
        if parsed is None:
            return None, False
        return parsed.strftime('%Y-%m-%dT%H:%M:%S') + f'.{parsed.microsecond // 1000:03d}Z', True
