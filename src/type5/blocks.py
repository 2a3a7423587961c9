"""ISO15693 block read/write over a card channel."""

import logging
from typing import Callable, Optional

from .channel import CardChannel
from .constants import (
    APDU_COMMANDS,
    BLOCK_SIZE,
    READ_MULTIPLE_BLOCKS,
    READ_PROBE_BLOCKS,
    WRITE_SINGLE_BLOCK,
)
from .exceptions import ArgumentError, TransportError


def _check_byte(value: int, what: str):
    if not 0 <= value <= 0xFF:
        raise ArgumentError(f"{what} must fit in one byte, got {value}")


class BlockDriver:
    """Vendor block commands (``FF FB``) for ISO15693 tags."""

    def __init__(self, channel: CardChannel, block_size: int = BLOCK_SIZE,
                 observer: Optional[Callable[[str], None]] = None):
        if block_size <= 0:
            raise ArgumentError("Block size must be > 0.")
        self.channel = channel
        self.block_size = block_size
        self.notify = observer or logging.debug

    def read_blocks(self, first_block: int, count_minus_1: int) -> bytes:
        """Read ``count_minus_1 + 1`` blocks starting at ``first_block``."""
        _check_byte(first_block, "First block")
        _check_byte(count_minus_1, "Block count")

        response = self.channel.transmit(
            *APDU_COMMANDS['ISO15693'],
            data=[READ_MULTIPLE_BLOCKS, first_block, count_minus_1]
        )
        if not response.ok:
            raise TransportError(f"ISO15693 ReadMultipleBlocks failed, {response.status}")
        if not response.data:
            raise TransportError("No data returned from ISO15693 Read Multiple Blocks.")

        if len(response.data) % self.block_size:
            logging.warning(f"Read returned {len(response.data)} bytes, "
                            f"not a multiple of block size {self.block_size}")
        return response.data

    def write_block(self, block_number: int, block_data: bytes):
        """Write exactly one block."""
        _check_byte(block_number, "Block number")
        if not block_data:
            raise ArgumentError("Block data is empty.")
        if len(block_data) != self.block_size:
            raise ArgumentError(
                f"Block data must be {self.block_size} bytes, got {len(block_data)}")

        response = self.channel.transmit(
            *APDU_COMMANDS['ISO15693'],
            data=[WRITE_SINGLE_BLOCK, block_number, *block_data]
        )
        if not response.ok:
            raise TransportError(
                f"ISO15693 WriteSingleBlock {block_number} failed, {response.status}")

    def read_memory(self) -> bytes:
        """
        Read the tag memory from block 0, probing for a supported size.

        The real capacity is unknown and not every tag accepts large multi
        block reads, so 64, 32, 16 and 8 blocks are tried in turn and the
        first successful read wins. If every probe fails the last error is
        raised.
        """
        last_error = None
        for count_minus_1 in READ_PROBE_BLOCKS:
            try:
                data = self.read_blocks(0, count_minus_1)
            except TransportError as e:
                self.notify(f"Read failed with numBlocksMinus1=0x{count_minus_1:02X}: {e}")
                last_error = e
                continue

            self.notify(f"Read success with numBlocksMinus1=0x{count_minus_1:02X}, "
                        f"bytes={len(data)}")
            return data

        raise last_error

    def check_range(self, start_block: int, length: int):
        """Raise ArgumentError if ``length`` bytes from ``start_block`` pass block 255."""
        last_block = start_block + max(0, length - 1) // self.block_size
        _check_byte(start_block, "First block")
        if last_block > 0xFF:
            raise ArgumentError(
                f"{length} bytes from block {start_block} end at block {last_block}, "
                f"past the last addressable block 255")

    def write_sequential(self, start_block: int, data: bytes) -> int:
        """Write ``data`` block by block from ``start_block``.

        The last chunk is zero padded. Returns the number of blocks written.
        The whole range is checked before the first write. Stops at the first
        failing block; earlier blocks stay written.
        """
        self.check_range(start_block, len(data))
        block = start_block
        for offset in range(0, len(data), self.block_size):
            chunk = bytes(data[offset:offset + self.block_size]).ljust(self.block_size, b'\x00')
            self.write_block(block, chunk)
            block += 1
        return block - start_block
