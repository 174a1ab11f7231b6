"""Exceptions raised while converting XMind files."""


class ConversionError(Exception):
    """Base class for fatal conversion errors."""


class ParseError(ConversionError):
    """The XML payload is malformed or has no root topic."""


class FileError(ConversionError):
    """The archive could not be read or holds no content entry."""
