"""NDEF message encoding and record display."""

import logging
from typing import List

import ndef

from .constants import PRINTABLE_RATIO
from .exceptions import ArgumentError, CodecError
from ..utils.hexcodec import to_hex


def encode_uri_message(url: str) -> bytes:
    """Encode a single-record NDEF message holding ``url``."""
    if not url:
        raise ArgumentError("URL is null or empty.")
    return b''.join(ndef.message_encoder([ndef.UriRecord(url)]))


def decode_message(payload: bytes) -> List[ndef.Record]:
    """Decode an NDEF message, rejecting malformed or empty messages."""
    try:
        records = list(ndef.message_decoder(payload))
    except (ndef.DecodeError, UnicodeDecodeError, ValueError) as e:
        raise CodecError(f"Error decoding NDEF: {e}")

    if not records:
        raise CodecError("No NDEF records found.")
    return records


def is_mostly_printable(text: str) -> bool:
    """True when at least 80% of characters are printable ASCII or CR/LF/TAB."""
    if not text:
        return False
    printable = sum(1 for c in text if c in '\r\n\t' or ' ' <= c <= '~')
    return printable / len(text) >= PRINTABLE_RATIO


def describe_record(record: ndef.Record) -> str:
    """Render a record as a string: URI, text, or payload as text or hex."""
    if isinstance(record, ndef.UriRecord):
        return record.iri
    if isinstance(record, ndef.TextRecord):
        return record.text

    payload = bytes(record.data)
    if not payload:
        return ""

    candidate = payload.decode('utf-8', errors='replace')
    if is_mostly_printable(candidate):
        return candidate
    logging.debug(f"Record {record.type!r} payload is binary, showing hex")
    return to_hex(payload)
