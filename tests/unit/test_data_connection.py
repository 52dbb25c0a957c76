"""Unit tests for PASV negotiation and the data connection."""

import io
from unittest.mock import MagicMock

import pytest

from pasv_ftp.ftp.data_connection import (
    DataConnection,
    PassiveEndpoint,
    negotiate_passive,
    parse_pasv_reply,
)
from pasv_ftp.ftp.exceptions import FTPTransportError, MalformedPassiveReplyError
from pasv_ftp.ftp.reply import Reply

from .fake_socket import FakeSocket


class TestParsePasvReply:
    """Tests for parse_pasv_reply()."""

    def test_standard_reply(self):
        """Test the RFC 959 form decodes to address and port."""
        endpoint = parse_pasv_reply("227 Entering Passive Mode (192,168,1,5,200,10)")
        assert endpoint == PassiveEndpoint(ip="192.168.1.5", port=51210)
        assert str(endpoint) == "192.168.1.5:51210"

    def test_arbitrary_separators(self):
        """Test any non-digit separates groups."""
        endpoint = parse_pasv_reply("227 ok (10; 0 ;0|1 , 4-1)")
        assert endpoint == PassiveEndpoint(ip="10.0.0.1", port=1025)

    def test_reply_without_parentheses(self):
        """Test groups after the code are used when there are no parentheses."""
        endpoint = parse_pasv_reply("227 =127,0,0,1,195,80")
        assert endpoint == PassiveEndpoint(ip="127.0.0.1", port=50000)

    def test_fewer_than_six_groups(self):
        """Test five groups is rejected."""
        with pytest.raises(MalformedPassiveReplyError) as exc_info:
            parse_pasv_reply("227 Entering Passive Mode (192,168,1,5,200)")
        assert "192,168,1,5,200" in exc_info.value.raw

    def test_no_groups(self):
        """Test a reply with no numbers is rejected."""
        with pytest.raises(MalformedPassiveReplyError):
            parse_pasv_reply("227 Entering Passive Mode ()")

    def test_octet_out_of_range(self):
        """Test a group above 255 is rejected."""
        with pytest.raises(MalformedPassiveReplyError):
            parse_pasv_reply("227 Entering Passive Mode (192,168,1,300,4,1)")
        with pytest.raises(MalformedPassiveReplyError):
            parse_pasv_reply("227 Entering Passive Mode (192,168,1,5,4,256)")


class TestNegotiatePassive:
    """Tests for negotiate_passive()."""

    def test_sends_pasv_expecting_227(self):
        """Test PASV is sent with 227 as the only allowed code."""
        control = MagicMock()
        control.send_command.return_value = Reply(
            code=227,
            raw_lines=("227 Entering Passive Mode (192,168,1,5,200,10)",),
        )

        endpoint = negotiate_passive(control)

        control.send_command.assert_called_once_with("PASV", 227)
        assert endpoint.port == 51210


class TestDataConnection:
    """Tests for DataConnection."""

    @pytest.fixture
    def endpoint(self) -> PassiveEndpoint:
        return PassiveEndpoint(ip="10.0.0.1", port=1025)

    def test_open_uses_timeout_policy(self, create_connection, endpoint):
        """Test the socket is connected with the millisecond timeout in seconds."""
        sock = FakeSocket()
        create_connection.return_value = sock

        data = DataConnection.open(endpoint, timeout_ms=1500)

        create_connection.assert_called_once_with(("10.0.0.1", 1025), timeout=1.5)
        assert data.is_open
        assert data.endpoint == endpoint

    def test_open_without_timeout(self, create_connection, endpoint):
        """Test 0 ms means a blocking socket."""
        create_connection.return_value = FakeSocket()

        DataConnection.open(endpoint, timeout_ms=0)

        create_connection.assert_called_once_with(("10.0.0.1", 1025), timeout=None)

    def test_open_failure_is_transport_error(self, create_connection, endpoint):
        """Test a refused connect surfaces as FTPTransportError."""
        create_connection.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(FTPTransportError):
            DataConnection.open(endpoint)

    def test_read_all_reads_to_end_of_stream(self, endpoint):
        """Test everything up to EOF is returned."""
        payload = b"x" * (DataConnection.BLOCK_SIZE * 2 + 7)
        data = DataConnection(FakeSocket(payload), endpoint)

        assert data.read_all() == payload

    def test_read_into_reports_chunks(self, endpoint):
        """Test read_into copies to the sink and reports block sizes."""
        payload = b"y" * (DataConnection.BLOCK_SIZE + 10)
        data = DataConnection(FakeSocket(payload), endpoint)
        sink = io.BytesIO()
        chunks = []

        total = data.read_into(sink, chunks.append)

        assert total == len(payload)
        assert sink.getvalue() == payload
        assert chunks == [DataConnection.BLOCK_SIZE, 10]

    def test_write_from_sends_everything(self, endpoint):
        """Test write_from drains the source into the socket."""
        sock = FakeSocket()
        data = DataConnection(sock, endpoint)

        total = data.write_from(io.BytesIO(b"AAA"))

        assert total == 3
        assert bytes(sock.sent) == b"AAA"

    def test_send_writes_bytes(self, endpoint):
        """Test send() puts the whole buffer on the socket."""
        sock = FakeSocket()
        data = DataConnection(sock, endpoint)

        data.send(b"hello")
        data.send(b" world")

        assert bytes(sock.sent) == b"hello world"

    def test_send_error_is_transport_error(self, endpoint):
        """Test a broken pipe while sending is translated."""
        sock = MagicMock()
        sock.sendall.side_effect = BrokenPipeError("broken pipe")
        data = DataConnection(sock, endpoint)

        with pytest.raises(FTPTransportError):
            data.send(b"AAA")

    def test_send_after_close_raises(self, endpoint):
        """Test a closed connection cannot send."""
        data = DataConnection(FakeSocket(), endpoint)
        data.close()

        with pytest.raises(ValueError):
            data.send(b"AAA")

    def test_read_error_is_transport_error(self, endpoint):
        """Test a socket error while reading is translated."""
        sock = MagicMock()
        sock.recv.side_effect = ConnectionResetError("reset")
        data = DataConnection(sock, endpoint)

        with pytest.raises(FTPTransportError):
            data.read_all()

    def test_close_is_idempotent(self, endpoint):
        """Test closing twice is harmless."""
        sock = FakeSocket()
        data = DataConnection(sock, endpoint)

        data.close()
        data.close()

        assert sock.closed
        assert data.is_open is False

    def test_use_after_close_raises(self, endpoint):
        """Test a closed connection cannot be read."""
        data = DataConnection(FakeSocket(b"abc"), endpoint)
        data.close()

        with pytest.raises(ValueError):
            data.read_all()

    def test_context_manager_closes(self, endpoint):
        """Test leaving the with block closes the socket."""
        sock = FakeSocket()
        with DataConnection(sock, endpoint):
            pass
        assert sock.closed
