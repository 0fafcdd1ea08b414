"""Tests for debug body sniffing."""

from __future__ import annotations

import io

import httpx

from lacework_client.http.sniffer import sniff_body


class TrackingStream:
    """Byte iterator that records whether it was closed."""

    def __init__(self, chunks: list[bytes], fail_read: bool = False, fail_close: bool = False) -> None:
        self.chunks = chunks
        self.fail_read = fail_read
        self.fail_close = fail_close
        self.closed = False

    def __iter__(self):
        for chunk in self.chunks:
            if self.fail_read:
                raise httpx.ReadError("connection lost")
            yield chunk

    def close(self) -> None:
        if self.fail_close:
            raise OSError("close failed")
        self.closed = True


class TestSniffBody:
    """Tests for sniff_body."""

    def test_returns_text_and_replayable_stream(self) -> None:
        original = TrackingStream([b'{"name": ', b'"rule"}'])

        stream, text = sniff_body(original)

        assert text == '{"name": "rule"}'
        assert b"".join(stream) == b'{"name": "rule"}'
        assert b"".join(stream) == b'{"name": "rule"}'

    def test_closes_original_stream(self) -> None:
        original = TrackingStream([b"data"])

        sniff_body(original)

        assert original.closed is True

    def test_accepts_file_like_objects(self) -> None:
        stream, text = sniff_body(io.BytesIO(b"payload"))

        assert text == "payload"
        assert b"".join(stream) == b"payload"

    def test_read_failure_returns_empty(self) -> None:
        stream, text = sniff_body(TrackingStream([b"data"], fail_read=True))

        assert text == ""
        assert b"".join(stream) == b""

    def test_close_failure_returns_empty(self) -> None:
        stream, text = sniff_body(TrackingStream([b"data"], fail_close=True))

        assert text == ""
        assert b"".join(stream) == b""

    def test_sniffed_response_reads_identical_bytes(self) -> None:
        body = b'{"data": [{"mcGuid": "ACME_1"}]}'
        response = httpx.Response(200, stream=httpx.ByteStream(body))

        response.stream, text = sniff_body(response.stream)

        assert text.encode() == body
        assert response.read() == body

    def test_invalid_utf8_is_replaced_in_text(self) -> None:
        stream, text = sniff_body([b"\xff\xfeok"])

        assert text.endswith("ok")
        assert b"".join(stream) == b"\xff\xfeok"
