"""Capability container layouts used when formatting a tag.

Two layouts are in use and they do not agree on the CC bytes:

* ``DerivedSizeFormat`` sizes MLen from the TLV being written and leaves the
  feature byte clear. Used by ``format_and_write``.
* ``FixedSizeFormat`` declares a fixed 320-byte NDEF area with the multiple
  block read feature set, as phone apps do for SLIX2. Used by ``format_empty``.
"""

import math
from dataclasses import dataclass

from .constants import (
    CC_MAGIC,
    CC_MAPPING_RW,
    FEATURE_MULTIPLE_BLOCK_READ,
    FEATURE_NONE,
    FIXED_NDEF_CAPACITY,
    MLEN_BASE_OFFSET,
    MLEN_UNIT,
)
from .exceptions import ArgumentError


@dataclass(frozen=True)
class DerivedSizeFormat:
    name: str = "derived-size"
    base_offset: int = MLEN_BASE_OFFSET
    features: int = FEATURE_NONE

    def mlen(self, tlv: bytes) -> int:
        end_offset = self.base_offset + len(tlv)
        units = max(1, math.ceil(end_offset / MLEN_UNIT))
        if units > 0x100:
            raise ArgumentError(f"NDEF area of {end_offset} bytes does not fit a 4-byte CC")
        return units - 1

    def capability_container(self, tlv: bytes) -> bytes:
        return bytes([CC_MAGIC, CC_MAPPING_RW, self.mlen(tlv), self.features])


@dataclass(frozen=True)
class FixedSizeFormat:
    name: str = "fixed-size"
    capacity: int = FIXED_NDEF_CAPACITY
    features: int = FEATURE_MULTIPLE_BLOCK_READ

    def mlen(self, tlv: bytes) -> int:
        return self.capacity // MLEN_UNIT

    def capability_container(self, tlv: bytes) -> bytes:
        return bytes([CC_MAGIC, CC_MAPPING_RW, self.mlen(tlv), self.features])


DERIVED_SIZE = DerivedSizeFormat()
FIXED_SIZE = FixedSizeFormat()
