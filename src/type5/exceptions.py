"""Type 5 tag exceptions."""


class Type5Error(Exception):
    """Base class for Type 5 tag exceptions."""
    kind = 'error'


class TransportError(Type5Error):
    """Bad status word or channel failure."""
    kind = 'transport'


class ReaderNotFoundError(TransportError):
    """No PC/SC reader found."""
    pass


class ReaderConnectionError(TransportError):
    """Failed to connect to reader."""
    pass


class FramingError(Type5Error):
    """Malformed or missing TLV in tag memory."""
    kind = 'framing'


class CapacityError(Type5Error):
    """New content does not fit in the remaining tag memory."""
    kind = 'capacity'


class ArgumentError(Type5Error, ValueError):
    """Invalid argument (empty input, odd-length hex, bad block size)."""
    kind = 'argument'


class CodecError(Type5Error):
    """NDEF message could not be decoded."""
    kind = 'codec'
