import pytest

from src.type5.exceptions import ArgumentError, FramingError
from src.type5.tlv import build_ndef_tlv, extract_ndef_payload, locate_ndef_tlv


def HEX(s):
    return bytes.fromhex(s)


###############################################################################
#
# BUILD
#
###############################################################################
class TestBuild:
    def test_short_message(self):
        assert build_ndef_tlv(HEX("D00000"), 4) == HEX("0303D000 00FE0000")

    @pytest.mark.parametrize("size, block_size", [
        (1, 4), (3, 4), (4, 4), (200, 8), (300, 4), (300, 16), (5, 1),
    ])
    def test_round_trip_and_padding(self, size, block_size):
        payload = bytes((i * 7 + 1) & 0xFF for i in range(size))
        tlv = build_ndef_tlv(payload, block_size)
        assert len(tlv) % block_size == 0
        assert extract_ndef_payload(tlv) == payload

    def test_254_bytes_use_short_length(self):
        tlv = build_ndef_tlv(bytes(254), 4)
        assert tlv[:2] == HEX("03FE")
        assert tlv[2 + 254] == 0xFE

    def test_255_bytes_use_extended_length(self):
        tlv = build_ndef_tlv(bytes(255), 4)
        assert tlv[:4] == HEX("03FF00FF")
        assert tlv[4 + 255] == 0xFE

    def test_256_bytes_use_big_endian_extended_length(self):
        tlv = build_ndef_tlv(bytes(256), 4)
        assert tlv[:4] == HEX("03FF0100")
        assert len(extract_ndef_payload(tlv)) == 256

    def test_padding_is_zero(self):
        tlv = build_ndef_tlv(b"\x01", 8)
        assert tlv == HEX("030101FE00000000")

    @pytest.mark.parametrize("block_size", [0, -4])
    def test_block_size_must_be_positive(self, block_size):
        with pytest.raises(ArgumentError):
            build_ndef_tlv(b"\x01", block_size)

    def test_message_too_large(self):
        with pytest.raises(ArgumentError):
            build_ndef_tlv(bytes(0x10000), 4)


###############################################################################
#
# LOCATE / EXTRACT
#
###############################################################################
class TestScan:
    def test_skips_cc_and_null_tlv(self):
        buffer = HEX("E1401000 00 0302AABB FE")
        assert locate_ndef_tlv(buffer) == 5
        assert extract_ndef_payload(buffer) == HEX("AABB")

    def test_null_tlv_without_cc(self):
        buffer = HEX("00 0302AABB FE")
        assert locate_ndef_tlv(buffer) == 1
        assert extract_ndef_payload(buffer) == HEX("AABB")

    def test_extended_length(self):
        payload = bytes(range(256))
        buffer = HEX("03FF0100") + payload + HEX("FE")
        assert locate_ndef_tlv(buffer) == 0
        assert extract_ndef_payload(buffer) == payload

    def test_skips_other_tlv(self):
        buffer = HEX("01021122 030155 FE")
        assert locate_ndef_tlv(buffer) == 4
        assert extract_ndef_payload(buffer) == HEX("55")

    def test_skips_other_tlv_with_extended_length(self):
        buffer = HEX("FDFF0002AABB 030177 FE")
        assert locate_ndef_tlv(buffer) == 6
        assert extract_ndef_payload(buffer) == HEX("77")

    def test_payload_is_copied_exactly(self):
        buffer = HEX("E1400800 0303D00000 FE 0303DEADBE")
        assert extract_ndef_payload(buffer) == HEX("D00000")

    def test_short_leading_e1_is_not_a_cc(self):
        # Fewer than four bytes: 0xE1 is scanned as an ordinary TLV type
        with pytest.raises(FramingError, match="No NDEF TLV"):
            locate_ndef_tlv(HEX("E10100"))

    @pytest.mark.parametrize("buffer", [b"", HEX("03"), HEX("0301")])
    def test_buffer_too_small(self, buffer):
        with pytest.raises(FramingError, match="too small"):
            extract_ndef_payload(buffer)

    def test_none_buffer(self):
        with pytest.raises(FramingError):
            locate_ndef_tlv(None)

    def test_terminator_before_ndef(self):
        with pytest.raises(FramingError, match="No NDEF TLV"):
            locate_ndef_tlv(HEX("E1401000 FE 0302AABB"))

    def test_end_of_buffer_without_ndef(self):
        with pytest.raises(FramingError, match="No NDEF TLV"):
            extract_ndef_payload(bytes(16))

    def test_incomplete_length_field(self):
        with pytest.raises(FramingError, match="Incomplete TLV length"):
            locate_ndef_tlv(HEX("000003"))

    def test_incomplete_extended_length_on_other_tlv(self):
        with pytest.raises(FramingError, match="extended"):
            locate_ndef_tlv(HEX("01FF00"))

    def test_incomplete_extended_length_on_ndef(self):
        buffer = HEX("03FF01")
        assert locate_ndef_tlv(buffer) == 0
        with pytest.raises(FramingError, match="extended"):
            extract_ndef_payload(buffer)

    def test_length_exceeds_buffer(self):
        with pytest.raises(FramingError, match="exceeds buffer"):
            extract_ndef_payload(HEX("0305AABB"))


class TestStrictCapabilityContainer:
    def test_valid_cc(self):
        buffer = HEX("E1400800 0302AABB FE")
        assert locate_ndef_tlv(buffer, strict_cc=True) == 4
        assert extract_ndef_payload(buffer, strict_cc=True) == HEX("AABB")

    def test_missing_cc_is_rejected(self):
        buffer = HEX("0302AABB FE000000")
        assert locate_ndef_tlv(buffer) == 0
        with pytest.raises(FramingError, match="capability container"):
            locate_ndef_tlv(buffer, strict_cc=True)

    def test_unsupported_mapping_version(self):
        with pytest.raises(FramingError, match="version"):
            extract_ndef_payload(HEX("E1800800 0302AABB FE"), strict_cc=True)
