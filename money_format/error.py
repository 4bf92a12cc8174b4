"""
A module for holding error classes.
"""


class BaseError(Exception):
    def __init__(self, message: str, error_key: str):
        self.message = message
        self.error_key = error_key
        super().__init__(self.message)


class FormatterError(BaseError):
    MISSING_CURRENCY_FIELD = "MISSING_CURRENCY_FIELD"
    INVALID_CURRENCY_RECORD = "INVALID_CURRENCY_RECORD"
    DECIMAL_PLACES_OUT_OF_RANGE = "DECIMAL_PLACES_OUT_OF_RANGE"
