import pytest
from smartcard.Exceptions import CardConnectionException, NoCardException

from src.type5 import channel as channel_module
from src.type5.channel import PCSCChannel, Response, build_apdu, list_readers
from src.type5.exceptions import ReaderConnectionError, ReaderNotFoundError, TransportError

from .fakes import FakeConnection, FakeReader


@pytest.fixture()
def fake_readers(monkeypatch):
    available = [
        FakeReader("ACS ACR1552 1S CL Reader PICC 0"),
        FakeReader("ACS ACR1552 1S CL Reader SAM 0"),
    ]
    monkeypatch.setattr(channel_module, "readers", lambda: available)
    return available


class TestBuildApdu:
    def test_get_uid(self):
        assert build_apdu(0xFF, 0xCA, 0x00, 0x00, le=0x00) == [0xFF, 0xCA, 0x00, 0x00, 0x00]

    def test_read_multiple_blocks(self):
        assert build_apdu(0xFF, 0xFB, 0x00, 0x00, [0x23, 0x00, 0x3F]) == \
            [0xFF, 0xFB, 0x00, 0x00, 0x03, 0x23, 0x00, 0x3F]

    def test_read_page(self):
        assert build_apdu(0xFF, 0xB0, 0x00, 0x04, le=0x04) == [0xFF, 0xB0, 0x00, 0x04, 0x04]


def test_response_status():
    assert Response(0x90, 0x00).ok
    assert not Response(0x63, 0x00).ok
    assert Response(0x6A, 0x82).status == "SW1=6A, SW2=82"


class TestPCSCChannel:
    def test_connects_to_first_reader(self, fake_readers):
        channel = PCSCChannel().connect()
        assert channel.name == "ACS ACR1552 1S CL Reader PICC 0"
        assert fake_readers[0].connection.connected

    def test_selects_reader_by_index(self, fake_readers):
        assert PCSCChannel("1").connect().name.endswith("SAM 0")

    def test_selects_reader_by_name(self, fake_readers):
        assert PCSCChannel("sam").connect().reader is fake_readers[1]

    def test_unknown_reader(self, fake_readers):
        with pytest.raises(ReaderNotFoundError):
            PCSCChannel("omnikey").connect()
        with pytest.raises(ReaderNotFoundError):
            PCSCChannel("5").connect()

    def test_no_readers(self, monkeypatch):
        monkeypatch.setattr(channel_module, "readers", lambda: [])
        with pytest.raises(ReaderNotFoundError):
            PCSCChannel().connect()

    def test_no_tag(self, monkeypatch):
        reader = FakeReader("Reader", FakeConnection(connect_error=NoCardException("no card", -1)))
        monkeypatch.setattr(channel_module, "readers", lambda: [reader])
        with pytest.raises(TransportError, match="No tag present"):
            PCSCChannel().connect()

    def test_transmit(self, fake_readers):
        fake_readers[0].connection.reply = ([0x04, 0xA1], 0x90, 0x00)
        channel = PCSCChannel().connect()
        response = channel.transmit(0xFF, 0xCA, 0x00, 0x00, le=0x00)
        assert response == Response(0x90, 0x00, b"\x04\xa1")
        assert fake_readers[0].connection.transmitted == [[0xFF, 0xCA, 0x00, 0x00, 0x00]]

    def test_transmit_failure(self, fake_readers):
        def broken(apdu):
            raise CardConnectionException("card removed")
        fake_readers[0].connection.transmit = broken
        channel = PCSCChannel().connect()
        with pytest.raises(TransportError, match="card removed"):
            channel.transmit(0xFF, 0xCA, 0x00, 0x00, le=0x00)

    def test_transmit_requires_connection(self):
        with pytest.raises(ReaderConnectionError):
            PCSCChannel().transmit(0xFF, 0xCA, 0x00, 0x00)

    def test_context_manager_disconnects(self, fake_readers):
        with PCSCChannel().connect() as channel:
            assert fake_readers[0].connection.connected
        assert not fake_readers[0].connection.connected
        assert channel.connection is None


def test_list_readers(fake_readers):
    assert list_readers() == [
        "ACS ACR1552 1S CL Reader PICC 0",
        "ACS ACR1552 1S CL Reader SAM 0",
    ]


def test_list_readers_empty(monkeypatch):
    monkeypatch.setattr(channel_module, "readers", lambda: [])
    assert list_readers() == []
