from typing import Optional


class RateEngineError(Exception):
    """Base class for errors raised by the pricing engine."""

    message = "Rate engine error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidWeightError(RateEngineError):
    """Non-positive (or non-numeric) dimension, weight, slab or increment."""

    message = "Weight and dimensions must be greater than 0"


class MalformedQuoteError(RateEngineError):
    """A raw courier quote is missing a required field or carries a bad value."""

    def __init__(
        self,
        path: str,
        reason: str = "field required",
        courier_id: Optional[str] = None,
    ):
        self.path = path
        self.reason = reason
        self.courier_id = courier_id
        super().__init__(f"Malformed quote at '{path}': {reason}")


class UnsupportedZoneError(RateEngineError):
    def __init__(self, zone, courier_id: Optional[str] = None):
        self.zone = zone
        self.courier_id = courier_id
        super().__init__(f"Unsupported zone: {zone!r}")


class SourceUnavailableError(RateEngineError):
    """A courier source answered but has no usable quote (not serviceable, auth failed)."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Courier source {source} unavailable: {reason}")
