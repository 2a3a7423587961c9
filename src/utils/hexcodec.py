"""Hex/byte conversions and UID byte-order helpers."""

import logging
import string
from typing import Tuple

from smartcard.util import toBytes, toHexString, PACK

from ..type5.exceptions import ArgumentError


def to_hex(data) -> str:
    """Render bytes as uppercase hex without separators."""
    return toHexString(list(data), PACK)


def from_hex(text: str) -> bytes:
    """Parse a hex string (spaces allowed) into bytes."""
    packed = text.replace(" ", "")
    if len(packed) % 2 != 0:
        raise ArgumentError("Hex string must have an even number of characters.")
    # toBytes parses pairs with int(x, 16), which also takes "+F" or "0x"
    if any(c not in string.hexdigits for c in packed):
        raise ArgumentError(f"Not a valid hex string: {text!r}")
    return bytes(toBytes(packed))


def reverse_hex_to_decimal(hex_input: str) -> Tuple[str, int]:
    """
    Reverse the byte order of a hex string and read it as an unsigned integer.

    Tag UIDs arrive in the byte order the chip transmits them; legacy backends
    expect the reversed, numeric form:

        >>> reverse_hex_to_decimal("04A1CCB1320289")
        ('890289B1CCA104', 38564862226112772)

    Python integers are unbounded, so UIDs longer than 8 bytes convert
    without overflow.
    """
    if not hex_input:
        return "", 0

    packed = hex_input.replace(" ", "").upper()
    reversed_bytes = from_hex(packed)[::-1]
    reversed_hex = to_hex(reversed_bytes)
    value = int.from_bytes(reversed_bytes, 'big')
    logging.debug(f"UID {packed} reversed to {reversed_hex} ({value})")
    return reversed_hex, value


def build_url_with_uid(base_url: str, uid: str) -> str:
    """Append ``uid=<UID>`` to a URL, using ``?`` or ``&`` as needed."""
    if not uid:
        logging.info("No UID available, writing base URL without uid parameter.")
        return base_url

    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}uid={uid}"
