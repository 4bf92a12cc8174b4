from __future__ import annotations

# Standard library imports
import logging
import re
import threading
from decimal import ROUND_HALF_UP, Decimal, localcontext
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Iterable,
    Mapping,
    Optional,
    Tuple,
    Union,
)

# Local application imports
from money_format.currency import (
    ABSOLUTE_MAX_DECIMAL_PLACES,
    DEFAULT_CURRENCY_CODE,
    Currency,
)
from money_format.error import FormatterError

logger = logging.getLogger(__name__)

# Minimum decimal precision used while rounding a value for display
DECIMAL_PRECISION = 28

# Everything that is not an ASCII digit or a dot is dropped before parsing
_NON_NUMERIC_CHARACTERS = re.compile(r"[^0-9.]")

# The part of the stripped text that is actually parsed, e.g. "1.2" of "1.2.3"
_LEADING_NUMBER = re.compile(r"[0-9]*(?:\.[0-9]*)?")

# Plain numeric literals, which select a currency by id instead of by code
_NUMERIC_LITERAL = re.compile(r"\s*[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\s*\Z")

Amount = Union[str, int, float, Decimal, None]

# Looks a currency record up by its numeric id, returns None when there is none
CurrencyFinder = Callable[[Any], Optional[Any]]


def parse_amount(value: Amount) -> float:
    """
    Leniently turn a (possibly already formatted) amount into a float.

    Every character that is not a digit or a dot is stripped first, so currency
    symbols, spaces, thousands separators and signs are all ignored:

        >>> parse_amount("£15.95")
        15.95
        >>> parse_amount("$1,234.50 USD")
        1234.5
        >>> parse_amount("-5")
        5.0

    Only the leading ``digits[.digits]`` part of what is left gets parsed
    ("1.2.3" gives 1.2). Input without any digit parses as zero.
    """
    if value is None:
        text = ""
    elif isinstance(value, bool):
        text = str(int(value))
    elif isinstance(value, float):
        # repr() keeps the shortest exact form, format "f" avoids "1e-07"
        text = format(Decimal(repr(value)), "f")
    elif isinstance(value, (int, Decimal)):
        text = format(Decimal(value), "f")
    else:
        text = str(value)

    stripped = _NON_NUMERIC_CHARACTERS.sub("", text)
    number = _LEADING_NUMBER.match(stripped).group()
    if not any(ch.isdigit() for ch in number):
        return 0.0
    return float(number)


def quantize_amount(value: Decimal, decimals: int) -> Decimal:
    """
    Round a Decimal half away from zero to `decimals` places.

    The decimal context is widened when the value needs more significant digits
    than DECIMAL_PRECISION, so very large amounts never fail to quantize.

    Raises:
        FormatterError: If decimals is outside 0..ABSOLUTE_MAX_DECIMAL_PLACES.
    """
    if decimals < 0 or decimals > ABSOLUTE_MAX_DECIMAL_PLACES:
        raise FormatterError(
            f"decimals must be between 0 and {ABSOLUTE_MAX_DECIMAL_PLACES}",
            FormatterError.DECIMAL_PLACES_OUT_OF_RANGE,
        )

    with localcontext() as ctx:
        ctx.prec = max(DECIMAL_PRECISION, value.adjusted() + decimals + 2)
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def render_number(
    value: Union[int, float, Decimal],
    decimals: int,
    decimal_point: str = ".",
    thousand_separator: str = ",",
) -> str:
    """
    Render a number with a fixed count of fractional digits.

    Integer digits are grouped by three from the right and joined with
    `thousand_separator` (which may be empty); the fraction is joined with
    `decimal_point`. With zero decimals no decimal point is written.

    Examples:
        >>> render_number(1234.5, 2, ",", ".")
        '1.234,50'
        >>> render_number(1234567.891, 0, ".", " ")
        '1 234 568'
    """
    amount = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    if not amount.is_finite():
        return str(float(amount))

    rounded = quantize_amount(amount, decimals)
    if rounded.is_zero():
        rounded = rounded.copy_abs()

    whole, _, fraction = f"{rounded:,.{decimals}f}".partition(".")
    whole = whole.replace(",", thousand_separator)
    if decimals:
        return f"{whole}{decimal_point}{fraction}"
    return whole


def is_numeric_selector(selector: Any) -> bool:
    """Return True if `selector` is a currency id rather than a currency code."""
    if isinstance(selector, bool):
        return False
    if isinstance(selector, (int, float, Decimal)):
        return True
    if isinstance(selector, str):
        return _NUMERIC_LITERAL.match(selector) is not None
    return False


def _plain_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


class MoneyFormatter:
    """
    Formats amounts for display using a set of configured currencies.

    The formatter holds the currencies known to the application (usually loaded
    from the database once at startup) and a default currency code used when a
    caller does not ask for a specific one.

    Example:
        formatter = MoneyFormatter()
        formatter.load(
            [
                {
                    "code": "USD",
                    "decimals": 2,
                    "decimal_point": ".",
                    "thousand_separator": ",",
                    "prefix": "$",
                    "suffix": "",
                }
            ]
        )
        formatter.format("1234.5")                  # "$1,234.50"
        formatter.format("1234.5", show_code=True)  # "$1,234.50 USD"

    A currency can also be selected by its numeric id. Ids are resolved with the
    `find_currency` callable given to the constructor, for instance a thin
    wrapper around an ORM query. When an id (or no currency at all) can be
    resolved, the parsed amount is returned without any formatting rather than
    raising.

    `load` publishes a new read-only snapshot of the currencies in a single
    assignment, so concurrent `format` calls see either the old or the new set,
    never a partially loaded one.
    """

    __slots__ = ("_state", "_find_currency", "_lock")

    def __init__(
        self,
        default_currency: str = DEFAULT_CURRENCY_CODE,
        find_currency: Optional[CurrencyFinder] = None,
    ):
        self._state: Tuple[Mapping[str, Currency], str] = (
            MappingProxyType({}),
            default_currency,
        )
        self._find_currency = find_currency
        self._lock = threading.Lock()

    @property
    def currencies(self) -> Mapping[str, Currency]:
        return self._state[0]

    @property
    def default_currency(self) -> str:
        return self._state[1]

    def load(
        self, records: Iterable[Any], default_currency: Optional[str] = None
    ) -> None:
        """
        Add currency records to the formatter.

        Records are keyed by their code; a record replaces any earlier one with
        the same code (including ones from previous calls), other codes are
        kept. If `default_currency` is given it becomes the default code.

        Args:
            records: Currency records, as accepted by `Currency.from_record`.
            default_currency: Optional code to use as the new default.

        Raises:
            FormatterError: If any record is malformed. Nothing is loaded then.
        """
        loaded = [Currency.from_record(record) for record in records]

        with self._lock:
            currencies, default_code = self._state
            merged = dict(currencies)
            merged.update((currency.code, currency) for currency in loaded)
            if default_currency:
                default_code = default_currency
            self._state = (MappingProxyType(merged), default_code)

        logger.debug(
            "Loaded %d currencies, default currency is %s", len(loaded), default_code
        )

    def resolve(self, currency: Any = None) -> Optional[Currency]:
        """
        Find the currency to format with.

        Numeric selectors are looked up by id through `find_currency`; any other
        selector is a currency code. Unknown or missing codes fall back to the
        default currency. Returns None when nothing usable is found.
        """
        currencies, default_code = self._state

        if is_numeric_selector(currency):
            record = None
            if self._find_currency is not None:
                record = self._find_currency(currency)
            if not record:
                logger.warning("Currency with id %s could not be found", currency)
                return None
            return Currency.from_record(record)

        if isinstance(currency, str) and currency:
            if currency in currencies:
                return currencies[currency]
            logger.debug(
                "Unknown currency %s, falling back to %s", currency, default_code
            )

        if default_code in currencies:
            return currencies[default_code]

        logger.warning(
            "No currency to format with (requested %r, default %r)",
            currency,
            default_code,
        )
        return None

    def format(
        self,
        value: Amount,
        currency: Any = None,
        hide_symbols: bool = False,
        show_code: bool = False,
    ) -> str:
        """
        Format an amount for display.

        Args:
            value: The amount. Strings may already be formatted ("£15.95",
                "1,234.50"); see `parse_amount`.
            currency: A currency code, a numeric currency id, or None for the
                default currency.
            hide_symbols: Leave out the currency prefix and suffix.
            show_code: Append a space and the currency code.

        Returns:
            str: The formatted amount, or the bare parsed amount (e.g. "15.95")
            if no currency could be resolved.
        """
        amount = parse_amount(value)
        resolved = self.resolve(currency)
        if resolved is None:
            return _plain_number(amount)

        text = render_number(
            amount,
            resolved.decimals,
            resolved.decimal_point,
            resolved.thousand_separator,
        )
        if not hide_symbols:
            text = f"{resolved.prefix}{text}{resolved.suffix}"
        if show_code:
            text = f"{text} {resolved.code}"
        return text
