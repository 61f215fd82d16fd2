"""HTTP response model and serializer."""

from dataclasses import dataclass, field
from email.utils import formatdate
from pathlib import Path

from config import SERVER_NAME

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    408: "Request Timeout",
    413: "Payload Too Large",
    414: "URI Too Long",
    431: "Request Header Fields Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    503: "Service Unavailable",
    505: "HTTP Version Not Supported",
}


@dataclass(slots=True)
class PreparedResponse:
    head: bytes
    body: bytes | None = None
    file_path: Path | None = None
    content_length: int = 0


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    reason_phrase: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""
    file_path: Path | None = None
    content_length: int | None = None
    head_only: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        if self.file_path is not None and self.body:
            raise ValueError("Response cannot set both body and file_path")

    def to_bytes(self) -> bytes:
        """Serialize the whole response, file body included, into memory.

        Test and debugging helper only; the server streams through
        ``socket_handler.write_http_response_message`` instead.
        """
        prepared = prepare_response(self)
        payload = bytearray(prepared.head)
        if prepared.body is not None:
            payload.extend(prepared.body)
        elif prepared.file_path is not None:
            with prepared.file_path.open("rb") as file_obj:
                payload.extend(file_obj.read(prepared.content_length))
        return bytes(payload)


def prepare_response(response: HTTPResponse) -> PreparedResponse:
    """Build the header block and decide where the body bytes come from.

    The Content-Length is fixed here, before any body byte is written: file
    responses advertise ``content_length`` (or the current file size when it
    was not measured up front) and the writer never sends more than that.
    """
    reason = response.reason_phrase or REASON_PHRASES.get(response.status_code, "Unknown")
    normalized_headers = dict(response.headers)
    normalized_headers.setdefault(
        "Date",
        formatdate(timeval=None, localtime=False, usegmt=True),
    )
    normalized_headers.setdefault("Server", SERVER_NAME)
    normalized_headers.setdefault("Content-Type", "text/plain; charset=utf-8")
    normalized_headers.setdefault("Connection", "close")

    body: bytes | None = None
    file_path: Path | None = None
    if response.file_path is not None:
        content_length = response.content_length
        if content_length is None:
            content_length = response.file_path.stat().st_size
        if not response.head_only:
            file_path = response.file_path
    else:
        body = bytes(response.body)
        content_length = response.content_length
        if content_length is None:
            content_length = len(body)
        if response.head_only:
            body = None

    normalized_headers["Content-Length"] = str(content_length)

    header_lines = [f"HTTP/1.1 {response.status_code} {reason}"]
    header_lines.extend(f"{key}: {value}" for key, value in normalized_headers.items())
    head = "\r\n".join(header_lines).encode("iso-8859-1") + b"\r\n\r\n"
    return PreparedResponse(
        head=head,
        body=body,
        file_path=file_path,
        content_length=content_length,
    )
