"""Low-level socket read/write utilities."""

from __future__ import annotations

import socket
from collections.abc import Iterator
from dataclasses import dataclass

from config import (
    BUFFER_SIZE,
    MAX_BODY_BYTES,
    MAX_HEADER_BYTES,
    READ_CHUNK_SIZE,
    WRITE_CHUNK_SIZE,
)
from response import HTTPResponse, prepare_response


class HTTPReadError(Exception):
    """Raised when a client request cannot be safely read from the socket."""


class MalformedRequestError(HTTPReadError):
    """Raised when socket bytes do not form a complete HTTP request."""


class HeaderTooLargeError(HTTPReadError):
    """Raised when HTTP headers exceed configured maximum size."""


class PayloadTooLargeError(HTTPReadError):
    """Raised when request body exceeds configured maximum size."""


class SocketTimeoutError(HTTPReadError):
    """Raised when a client times out while sending request bytes."""


class UnsupportedTransferEncodingError(HTTPReadError):
    """Raised when a request body uses a transfer coding the server cannot frame."""


class IncompleteBodyError(OSError):
    """Raised when a file yields fewer bytes than its advertised length."""


@dataclass(slots=True)
class RequestHeadInfo:
    header_end_index: int
    expected_body_length: int


def _iter_header_fields(header_bytes: bytes) -> Iterator[tuple[str, str]]:
    lines = header_bytes.decode("iso-8859-1").split("\r\n")
    for line in lines[1:]:
        if not line:
            continue
        if ":" not in line:
            raise MalformedRequestError("Malformed header while reading request")
        name, value = line.split(":", 1)
        yield name.strip().lower(), value.strip()


def _extract_content_length(header_bytes: bytes) -> int:
    for name, value in _iter_header_fields(header_bytes):
        if name == "transfer-encoding":
            raise UnsupportedTransferEncodingError(f"Unsupported Transfer-Encoding: {value}")
        if name == "content-length":
            try:
                parsed_length = int(value)
            except ValueError as exc:
                raise MalformedRequestError("Invalid Content-Length header") from exc
            if parsed_length < 0:
                raise MalformedRequestError("Negative Content-Length header")
            return parsed_length
    return 0


def inspect_http_request_head(buffer: bytes) -> RequestHeadInfo | None:
    """Inspect request headers from an in-memory buffer, if complete."""
    header_end_index = buffer.find(b"\r\n\r\n")
    if header_end_index == -1:
        if len(buffer) > MAX_HEADER_BYTES:
            raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")
        return None

    if header_end_index + 4 > MAX_HEADER_BYTES:
        raise HeaderTooLargeError("Headers exceeded MAX_HEADER_BYTES")

    expected_body_length = _extract_content_length(bytes(buffer[:header_end_index]))
    if expected_body_length > MAX_BODY_BYTES:
        raise PayloadTooLargeError("Body exceeded MAX_BODY_BYTES")

    return RequestHeadInfo(
        header_end_index=header_end_index,
        expected_body_length=expected_body_length,
    )


def extract_http_request_message(buffer: bytes) -> bytes | None:
    """Extract one complete HTTP request from a bytes buffer."""
    head_info = inspect_http_request_head(buffer)
    if head_info is None:
        return None

    request_length = head_info.header_end_index + 4 + head_info.expected_body_length
    if len(buffer) < request_length:
        return None
    return buffer[:request_length]


def read_http_request(client_socket: socket.socket) -> bytes:
    """Read one HTTP request; returns b"" when the peer sent nothing."""
    buffer = bytearray()

    while True:
        request_bytes = extract_http_request_message(bytes(buffer))
        if request_bytes is not None:
            return request_bytes

        try:
            chunk = client_socket.recv(max(BUFFER_SIZE, READ_CHUNK_SIZE))
        except socket.timeout as exc:
            raise SocketTimeoutError("Timed out waiting for request bytes") from exc

        if not chunk:
            if not buffer:
                return b""
            raise MalformedRequestError("Connection closed before request completed")

        buffer.extend(chunk)


def write_http_response_message(
    client_socket: socket.socket,
    response: HTTPResponse,
    *,
    write_chunk_size: int = WRITE_CHUNK_SIZE,
) -> int:
    """Write an HTTPResponse, copying file bodies through a fixed-size buffer.

    File bodies are opened before the head is sent so a file that vanished
    after resolution aborts the response without emitting a status line.
    At most the advertised Content-Length is copied; a file that shrinks
    raises IncompleteBodyError after a partial body.
    """
    prepared = prepare_response(response)

    if prepared.file_path is None:
        client_socket.sendall(prepared.head)
        bytes_sent = len(prepared.head)
        if prepared.body:
            client_socket.sendall(prepared.body)
            bytes_sent += len(prepared.body)
        return bytes_sent

    with prepared.file_path.open("rb") as file_obj:
        client_socket.sendall(prepared.head)
        bytes_sent = len(prepared.head)
        buffer = bytearray(write_chunk_size)
        view = memoryview(buffer)
        remaining = prepared.content_length
        while remaining > 0:
            read_count = file_obj.readinto(view[: min(write_chunk_size, remaining)])
            if not read_count:
                raise IncompleteBodyError(
                    f"{prepared.file_path} ended with {remaining} bytes still advertised"
                )
            client_socket.sendall(view[:read_count])
            remaining -= read_count
            bytes_sent += read_count
    return bytes_sent
