from utils.exceptions import (
    InvalidWeightError,
    MalformedQuoteError,
    RateEngineError,
    SourceUnavailableError,
    UnsupportedZoneError,
)

__all__ = [
    "RateEngineError",
    "InvalidWeightError",
    "MalformedQuoteError",
    "UnsupportedZoneError",
    "SourceUnavailableError",
]
