"""NDEF TLV framing for Type 5 tag memory."""

import logging
from typing import Tuple

from .constants import (
    CC_MAGIC,
    CC_SIZE,
    TLV_EXTENDED_LENGTH,
    TLV_NDEF,
    TLV_NULL,
    TLV_TERMINATOR,
)
from .exceptions import ArgumentError, FramingError


def _scan_start(buffer: bytes, strict_cc: bool) -> int:
    """Return the offset where TLV scanning begins."""
    if buffer is None or len(buffer) < 3:
        raise FramingError("Buffer too small for TLV.")

    if strict_cc:
        if len(buffer) < CC_SIZE or buffer[0] != CC_MAGIC:
            raise FramingError(f"No capability container (first byte 0x{buffer[0]:02X}).")
        major_version = buffer[1] >> 6
        if major_version != 1:
            raise FramingError(f"Unsupported CC mapping version {major_version}.")
        return CC_SIZE

    # Permissive: a leading 0xE1 is taken to be a CC and skipped unchecked
    if buffer[0] == CC_MAGIC and len(buffer) >= CC_SIZE:
        return CC_SIZE
    return 0


def _read_length(buffer: bytes, i: int) -> Tuple[int, int]:
    """Decode the length field of the TLV at ``i``.

    Returns ``(length, value_start)``.
    """
    if i + 1 >= len(buffer):
        raise FramingError("Incomplete TLV length field.")

    length = buffer[i + 1]
    if length != TLV_EXTENDED_LENGTH:
        return length, i + 2

    if i + 3 >= len(buffer):
        raise FramingError("Incomplete extended TLV length.")
    return (buffer[i + 2] << 8) | buffer[i + 3], i + 4


def _find_ndef(buffer: bytes, strict_cc: bool) -> int:
    i = _scan_start(buffer, strict_cc)

    while i < len(buffer):
        tlv_type = buffer[i]

        if tlv_type == TLV_NULL:
            i += 1
            continue

        if tlv_type == TLV_TERMINATOR:
            break

        if i + 1 >= len(buffer):
            raise FramingError("Incomplete TLV length field.")
        if tlv_type == TLV_NDEF:
            return i

        length, value_start = _read_length(buffer, i)
        logging.debug(f"Skipping TLV 0x{tlv_type:02X} ({length} bytes) at offset {i}")
        i = value_start + length

    raise FramingError("No NDEF TLV (0x03) found.")


def locate_ndef_tlv(buffer: bytes, strict_cc: bool = False) -> int:
    """Return the byte offset of the first NDEF TLV in a memory image."""
    return _find_ndef(buffer, strict_cc)


def extract_ndef_payload(buffer: bytes, strict_cc: bool = False) -> bytes:
    """Return the NDEF message carried by the first NDEF TLV."""
    offset = _find_ndef(buffer, strict_cc)
    length, start = _read_length(buffer, offset)

    if start + length > len(buffer):
        raise FramingError("NDEF length exceeds buffer size.")

    return bytes(buffer[start:start + length])


def build_ndef_tlv(encoded_message: bytes, block_size: int) -> bytes:
    """
    Frame an encoded NDEF message as a TLV ready to be written.

    Layout is ``03 LEN <message> FE`` followed by zero padding up to the next
    multiple of ``block_size``. Messages of 255 bytes or more use the
    three-byte length form ``FF HI LO``.
    """
    if block_size <= 0:
        raise ArgumentError("Block size must be > 0.")

    length = len(encoded_message)
    if length > 0xFFFF:
        raise ArgumentError(f"NDEF message too large for TLV ({length} bytes).")

    tlv = bytearray([TLV_NDEF])
    if length < TLV_EXTENDED_LENGTH:
        tlv.append(length)
    else:
        tlv += bytes([TLV_EXTENDED_LENGTH, length >> 8, length & 0xFF])
    tlv += encoded_message
    tlv.append(TLV_TERMINATOR)

    tlv += bytes(-len(tlv) % block_size)
    return bytes(tlv)
