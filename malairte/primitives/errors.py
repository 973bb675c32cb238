"""Errors raised while decoding wire-format primitives."""


class DeserializationError(ValueError):
    """Raised when bytes cannot be decoded into a primitive."""

    default_message = "deserialization failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidVarIntError(DeserializationError):
    """Raised for a malformed variable-length integer or framing byte."""

    default_message = "invalid varint encoding"


class TooShortError(DeserializationError):
    """Raised when the input ends before the structure is complete."""

    default_message = "data too short for deserialization"