from money_format.currency import (
    ABSOLUTE_MAX_DECIMAL_PLACES,
    DEFAULT_CURRENCY_CODE,
    Currency,
)
from money_format.error import BaseError, FormatterError
from money_format.formatter import (
    MoneyFormatter,
    is_numeric_selector,
    parse_amount,
    quantize_amount,
    render_number,
)

__all__ = [
    "ABSOLUTE_MAX_DECIMAL_PLACES",
    "DEFAULT_CURRENCY_CODE",
    "BaseError",
    "Currency",
    "FormatterError",
    "MoneyFormatter",
    "is_numeric_selector",
    "parse_amount",
    "quantize_amount",
    "render_number",
]
