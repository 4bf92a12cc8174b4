"""
A module for holding currency-related information.

Currency records normally come from the host application's database. They are
validated once, when they are handed to the formatter, so that a broken row
fails loudly at load time instead of producing odd output later.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Optional

# Library we need to support custom serializations
from pydantic_core import core_schema

from money_format.error import FormatterError

# Fallback currency code used when none is configured
DEFAULT_CURRENCY_CODE = "USD"

# Absolute maximum number of decimal places supported (like types Decimal128)
ABSOLUTE_MAX_DECIMAL_PLACES = 34

# Fields every currency record has to expose
CURRENCY_FIELDS = (
    "code",
    "decimals",
    "decimal_point",
    "thousand_separator",
    "prefix",
    "suffix",
)

# Fields that may be NULL in the database and render as nothing
NULLABLE_FIELDS = ("thousand_separator", "prefix", "suffix")

_MISSING = object()


def _read_field(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        value = record.get(field, _MISSING)
    else:
        value = getattr(record, field, _MISSING)
    if value is _MISSING:
        raise FormatterError(
            f"Currency record is missing field '{field}': {record!r}",
            FormatterError.MISSING_CURRENCY_FIELD,
        )
    return value


def _validate_decimals(value: Any, code: str) -> int:
    if isinstance(value, bool):
        raise FormatterError(
            f"Invalid decimals for currency {code}: {value!r}",
            FormatterError.INVALID_CURRENCY_RECORD,
        )
    try:
        decimals = int(value)
    except (TypeError, ValueError):
        raise FormatterError(
            f"Invalid decimals for currency {code}: {value!r}",
            FormatterError.INVALID_CURRENCY_RECORD,
        )
    if not isinstance(value, str) and value != decimals:
        raise FormatterError(
            f"Invalid decimals for currency {code}: {value!r}",
            FormatterError.INVALID_CURRENCY_RECORD,
        )
    if decimals < 0 or decimals > ABSOLUTE_MAX_DECIMAL_PLACES:
        raise FormatterError(
            f"decimals must be between 0 and {ABSOLUTE_MAX_DECIMAL_PLACES}",
            FormatterError.DECIMAL_PLACES_OUT_OF_RANGE,
        )
    return decimals


class Currency:
    """
    Display settings for a single currency.

    A Currency describes how a value is rendered: how many fractional digits
    to show, which characters separate the fraction and the thousands groups,
    and which strings wrap the number (usually the currency symbol).

    Example:
        gbp = Currency.from_record(
            {
                "code": "GBP",
                "decimals": 2,
                "decimal_point": ".",
                "thousand_separator": ",",
                "prefix": "£",
                "suffix": "",
            }
        )

    Instances are read-only; build a new one to change a setting.
    """

    __slots__ = (
        "_code",
        "_decimals",
        "_decimal_point",
        "_thousand_separator",
        "_prefix",
        "_suffix",
    )

    def __init__(
        self,
        code: str,
        decimals: int = 2,
        decimal_point: str = ".",
        thousand_separator: str = ",",
        prefix: str = "",
        suffix: str = "",
    ):
        self._code = code
        self._decimals = decimals
        self._decimal_point = decimal_point
        self._thousand_separator = thousand_separator
        self._prefix = prefix
        self._suffix = suffix

    @property
    def code(self) -> str:
        return self._code

    @property
    def decimals(self) -> int:
        return self._decimals

    @property
    def decimal_point(self) -> str:
        return self._decimal_point

    @property
    def thousand_separator(self) -> str:
        return self._thousand_separator

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def suffix(self) -> str:
        return self._suffix

    @classmethod
    def from_record(cls, record: Any) -> Currency:
        """
        Build a validated Currency from a host record.

        Args:
            record: A Currency, a mapping with the currency fields, or any object
                exposing them as attributes (ORM rows, namedtuples, ...).

        Returns:
            Currency: The validated currency.

        Raises:
            FormatterError: MISSING_CURRENCY_FIELD if a field is absent,
                INVALID_CURRENCY_RECORD if a field has the wrong type, or
                DECIMAL_PLACES_OUT_OF_RANGE if decimals is negative or too large.
        """
        if isinstance(record, Currency):
            return record

        values = {field: _read_field(record, field) for field in CURRENCY_FIELDS}

        code = values["code"]
        if not isinstance(code, str) or not code:
            raise FormatterError(
                f"Invalid currency code: {code!r}",
                FormatterError.INVALID_CURRENCY_RECORD,
            )

        for field in NULLABLE_FIELDS:
            if values[field] is None:
                values[field] = ""

        for field in ("decimal_point",) + NULLABLE_FIELDS:
            if not isinstance(values[field], str):
                raise FormatterError(
                    f"Invalid {field} for currency {code}: {values[field]!r}",
                    FormatterError.INVALID_CURRENCY_RECORD,
                )

        return cls(
            code=code,
            decimals=_validate_decimals(values["decimals"], code),
            decimal_point=values["decimal_point"],
            thousand_separator=values["thousand_separator"],
            prefix=values["prefix"],
            suffix=values["suffix"],
        )

    def as_dict(self) -> Dict[str, Any]:
        return {field: getattr(self, field) for field in CURRENCY_FIELDS}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self) -> int:
        return hash(tuple(self.as_dict().values()))

    def __repr__(self) -> str:
        return (
            f"Currency({self._code!r}, decimals={self._decimals}, "
            f"decimal_point={self._decimal_point!r}, "
            f"thousand_separator={self._thousand_separator!r}, "
            f"prefix={self._prefix!r}, suffix={self._suffix!r})"
        )

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: Any
    ) -> core_schema.CoreSchema:
        """
        Let pydantic models use Currency as a field type.
        https://docs.pydantic.dev/latest/concepts/types/#customizing-validation-with-__get_pydantic_core_schema__
        """
        return core_schema.with_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                cls.as_dict
            ),
        )

    @classmethod
    def _validate(cls, value: Any, context: Optional[Any] = None) -> Currency:
        try:
            return cls.from_record(value)
        except FormatterError as e:
            # pydantic only turns ValueError into a ValidationError
            raise ValueError(e.message) from e
