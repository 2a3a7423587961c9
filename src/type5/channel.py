"""Card channel: APDU exchange with a PC/SC reader."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from smartcard.System import readers
from smartcard.util import toHexString
from smartcard.Exceptions import NoCardException, SmartcardException

from .constants import SW_SUCCESS
from .exceptions import ReaderConnectionError, ReaderNotFoundError, TransportError


@dataclass
class Response:
    """Status word and data returned by the tag."""
    sw1: int
    sw2: int
    data: bytes = field(default=b'')

    @property
    def ok(self) -> bool:
        return (self.sw1, self.sw2) == SW_SUCCESS

    @property
    def status(self) -> str:
        return f"SW1={self.sw1:02X}, SW2={self.sw2:02X}"


class CardChannel:
    """Request/response channel to a single tag.

    Implementations block until the tag answers; timeouts belong to the
    transport underneath.
    """

    name = ""

    def transmit(self, cla: int, ins: int, p1: int, p2: int,
                 data: Optional[Sequence[int]] = None,
                 le: Optional[int] = None) -> Response:
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def build_apdu(cla: int, ins: int, p1: int, p2: int,
               data: Optional[Sequence[int]] = None,
               le: Optional[int] = None) -> List[int]:
    """Assemble a short APDU: header, optional Lc + data, optional Le."""
    apdu = [cla, ins, p1, p2]
    if data:
        apdu += [len(data)] + list(data)
    if le is not None:
        apdu.append(le)
    return apdu


def list_readers() -> List[str]:
    """Return the names of all available PC/SC readers."""
    try:
        available = readers()
    except SmartcardException as e:
        logging.warning(f"Could not list readers: {e}")
        return []

    if not available:
        logging.warning("No NFC readers found. Please check driver installation.")
        return []

    names = [str(r) for r in available]
    for name in names:
        logging.debug(f"Reader: {name}")
    return names


class PCSCChannel(CardChannel):
    """Card channel over a pyscard reader connection."""

    def __init__(self, reader: Optional[str] = None):
        self.reader_hint = reader
        self.reader = None
        self.connection = None

    @property
    def name(self) -> str:
        return str(self.reader) if self.reader else ""

    def _select_reader(self, available):
        if self.reader_hint is None:
            return available[0]
        if self.reader_hint.isdigit():
            index = int(self.reader_hint)
            if index >= len(available):
                raise ReaderNotFoundError(f"No reader at index {index}")
            return available[index]
        for r in available:
            if self.reader_hint.lower() in str(r).lower():
                return r
        raise ReaderNotFoundError(f"No reader matching '{self.reader_hint}'")

    def connect(self) -> 'PCSCChannel':
        """Connect to the reader and the tag on it."""
        try:
            available = readers()
        except SmartcardException as e:
            raise ReaderConnectionError(f"Failed to list readers: {e}")
        if not available:
            raise ReaderNotFoundError(
                "No smart card readers found. Is your NFC reader driver installed?")

        self.reader = self._select_reader(available)
        logging.info(f"Found reader: {self.reader}")

        self.connection = self.reader.createConnection()
        try:
            self.connection.connect()
        except NoCardException:
            raise TransportError(f"No tag present on reader '{self.reader}'")
        except SmartcardException as e:
            raise ReaderConnectionError(f"Failed to connect to reader '{self.reader}': {e}")

        logging.debug("Successfully connected to reader")
        return self

    def transmit(self, cla, ins, p1, p2, data=None, le=None) -> Response:
        if not self.connection:
            raise ReaderConnectionError("Reader not connected")

        apdu = build_apdu(cla, ins, p1, p2, data, le)
        logging.debug(f"> {toHexString(apdu)}")
        try:
            response, sw1, sw2 = self.connection.transmit(apdu)
        except SmartcardException as e:
            raise TransportError(f"APDU transmit error: {e}")
        logging.debug(f"< {toHexString(list(response))} [{sw1:02X} {sw2:02X}]")
        return Response(sw1, sw2, bytes(response))

    def close(self):
        """Close the connection to the reader."""
        if self.connection:
            self.connection.disconnect()
            self.connection = None
            logging.debug("Reader connection closed")
