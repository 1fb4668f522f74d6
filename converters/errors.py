"""Exceptions raised while converting a block tree."""


class ConversionError(Exception):
    """Base exception for malformed input met during conversion."""
    pass


class MissingMediaError(ConversionError):
    """A media block carries no usable URL."""
    pass
