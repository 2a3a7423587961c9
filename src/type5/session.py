"""Type 5 tag read, format and overwrite pipelines."""

import logging
from typing import Callable, List, Optional

from smartcard.Exceptions import SmartcardException

from .blocks import BlockDriver
from .channel import CardChannel
from .constants import (
    APDU_COMMANDS,
    BLOCK_SIZE,
    CC_BLOCK,
    EMPTY_NDEF_MESSAGE,
    NDEF_START_BLOCK,
    TEST_BLOCK_PATTERN,
)
from .exceptions import CapacityError, TransportError, Type5Error
from .formats import DERIVED_SIZE, FIXED_SIZE
from .records import decode_message, describe_record, encode_uri_message
from .result import Result
from .tlv import build_ndef_tlv, extract_ndef_payload, locate_ndef_tlv
from ..utils.hexcodec import to_hex


class Type5Session:
    """
    Operations on one ISO15693 tag through a card channel.

    Every public method returns a ``Result`` instead of raising. Failures
    name the reader and the underlying cause. Progress is reported to
    ``observer`` (``logging.info`` by default).

    The session assumes exclusive use of the channel; callers must not
    interleave operations on the same tag.
    """

    def __init__(self, channel: CardChannel, reader_name: Optional[str] = None,
                 block_size: int = BLOCK_SIZE,
                 observer: Optional[Callable[[str], None]] = None,
                 strict_cc: bool = False):
        self.channel = channel
        self.reader_name = reader_name if reader_name is not None else channel.name
        self.notify = observer or logging.info
        self.blocks = BlockDriver(channel, block_size, observer=self.notify)
        self.block_size = block_size
        self.strict_cc = strict_cc

    def _failure(self, error: Exception, action: str) -> Result:
        if isinstance(error, Type5Error):
            result = Result.from_error(error, f"{action} on reader '{self.reader_name}'")
        else:
            result = Result.failure(
                TransportError.kind,
                f"Exception {action.lower()} on reader '{self.reader_name}': {error}")
        logging.error(result.message)
        return result

    def _uid(self) -> str:
        response = self.channel.transmit(*APDU_COMMANDS['GET_UID'], le=0x00)
        if not response.ok or not response.data:
            raise TransportError(f"Failed to read UID, {response.status}")
        return to_hex(response.data)

    def _announce(self, tag: str):
        """Report the UID before a write; a missing UID does not stop the write."""
        try:
            uid = self._uid()
        except TransportError as e:
            logging.warning(f"[{tag}] {e}")
            uid = ""
        self.notify(f"[{tag}] UID={uid} on reader '{self.reader_name}'")

    def _read_memory(self, tag: str) -> bytes:
        raw = self.blocks.read_memory()
        logging.debug(f"[{tag}] Raw first 32 bytes: {to_hex(raw[:32])}")
        return raw

    def _write_formatted(self, cc: bytes, tlv: bytes):
        self.blocks.check_range(NDEF_START_BLOCK, len(tlv))
        self.blocks.write_sequential(CC_BLOCK, cc)
        try:
            self.blocks.write_sequential(NDEF_START_BLOCK, tlv)
        except Type5Error as e:
            raise type(e)(f"{e} (CC already written, tag left partially written)") from e

    def read_uid(self) -> Result:
        """Read the tag UID as uppercase hex."""
        try:
            uid = self._uid()
        except (Type5Error, SmartcardException) as e:
            return self._failure(e, "Reading UID")
        self.notify(f"UID={uid} on reader '{self.reader_name}'")
        return Result.success(uid)

    def read_tag(self) -> Result:
        """
        Read the UID and the NDEF records stored on the tag.

        On success the value is ``(uid, records)`` where each record is a
        display string (URI, text, or the payload as text or hex).
        """
        try:
            uid = self._uid()
            self.notify(f"[Type5] UID={uid} on reader '{self.reader_name}'")

            raw = self._read_memory("Type5")
            payload = extract_ndef_payload(raw, strict_cc=self.strict_cc)
            self.notify(f"[Type5] NDEF payload length: {len(payload)}")

            records: List[str] = [describe_record(r) for r in decode_message(payload)]
        except (Type5Error, SmartcardException) as e:
            return self._failure(e, "Reading Type-5 NDEF")

        return Result.success((uid, records))

    def format_and_write(self, url: str) -> Result:
        """
        Format the tag and write ``url`` as its only NDEF record.

        Overwrites the CC in block 0 and the NDEF area from block 1. A block
        write failure after the CC leaves the tag partially written.
        """
        try:
            tlv = build_ndef_tlv(encode_uri_message(url), self.block_size)
            self._announce("Type5-Write")

            cc = DERIVED_SIZE.capability_container(tlv)
            self.notify(f"[Type5-Write] CC={to_hex(cc)}, TLV {len(tlv)} bytes")
            self._write_formatted(cc, tlv)
        except (Type5Error, SmartcardException) as e:
            return self._failure(e, "Writing Type-5 NDEF")

        return Result.success()

    def format_empty(self) -> Result:
        """Format the tag as NDEF holding one empty record.

        Uses the fixed 320-byte layout with the multiple block read feature.
        """
        try:
            self._announce("FormatType5")

            tlv = build_ndef_tlv(EMPTY_NDEF_MESSAGE, self.block_size)
            self._write_formatted(FIXED_SIZE.capability_container(tlv), tlv)
        except (Type5Error, SmartcardException) as e:
            return self._failure(e, "Formatting Type-5 tag")

        return Result.success()

    def overwrite_in_place(self, url: str) -> Result:
        """
        Replace the existing NDEF TLV with one holding ``url``.

        Only the blocks covered by the new TLV are rewritten; the CC and
        anything beyond the new TLV stay as they are. The tag must already be
        NDEF formatted.
        """
        try:
            new_tlv = build_ndef_tlv(encode_uri_message(url), self.block_size)
            self._announce("Type5-Overwrite")

            raw = bytearray(self._read_memory("Type5-Overwrite"))
            offset = locate_ndef_tlv(raw, strict_cc=self.strict_cc)
            self.notify(f"[Type5-Overwrite] NDEF TLV at offset {offset}")

            available = len(raw) - offset
            if len(new_tlv) > available:
                raise CapacityError(
                    f"New NDEF TLV ({len(new_tlv)} bytes) does not fit in "
                    f"remaining memory ({available} bytes).")

            raw[offset:offset + len(new_tlv)] = new_tlv

            first_block = offset // self.block_size
            last_block = (offset + len(new_tlv) - 1) // self.block_size
            self.notify(f"[Type5-Overwrite] Writing blocks {first_block}..{last_block}")

            for block in range(first_block, last_block + 1):
                start = block * self.block_size
                if start + self.block_size > len(raw):
                    break
                self.blocks.write_block(block, bytes(raw[start:start + self.block_size]))
        except (Type5Error, SmartcardException) as e:
            return self._failure(e, "Overwriting NDEF")

        return Result.success()

    def write_read_check(self, block_number: int) -> Result:
        """Write a test pattern to one block and read it back.

        Destroys the block's previous content. The value is the data read.
        """
        try:
            self.blocks.write_block(block_number, TEST_BLOCK_PATTERN)
            data = self.blocks.read_blocks(block_number, 0)
        except (Type5Error, SmartcardException) as e:
            return self._failure(e, f"Testing block {block_number}")

        self.notify(f"Block {block_number} read back: {to_hex(data)}")
        return Result.success(data)

