"""HTTP request model and parser."""

from dataclasses import dataclass, field
from urllib.parse import urlsplit

from config import MAX_BODY_BYTES, MAX_TARGET_LENGTH

ALLOWED_HTTP_VERSIONS = {"HTTP/1.1", "HTTP/1.0"}


class HTTPRequestParseError(ValueError):
    """Request parse error carrying an HTTP status code."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class HTTPRequest:
    method: str
    path: str
    http_version: str
    raw_target: str = "/"
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def from_bytes(cls, raw: bytes) -> "HTTPRequest":
        """Parse raw HTTP request bytes into a structured request object."""
        try:
            header_bytes, body = raw.split(b"\r\n\r\n", 1)
        except ValueError as exc:
            raise HTTPRequestParseError("Missing CRLF CRLF request separator") from exc

        lines = header_bytes.decode("iso-8859-1").split("\r\n")
        if not lines or not lines[0]:
            raise HTTPRequestParseError("Missing request line")

        first_line_parts = lines[0].split(" ")
        if len(first_line_parts) != 3:
            raise HTTPRequestParseError("Invalid request line")

        method, target, http_version = first_line_parts
        if not method or not target or not http_version:
            raise HTTPRequestParseError("Request line contains empty tokens")

        if http_version not in ALLOWED_HTTP_VERSIONS:
            raise HTTPRequestParseError("Unsupported HTTP version", status_code=505)

        if len(target) > MAX_TARGET_LENGTH:
            raise HTTPRequestParseError("Request target too long", status_code=414)

        if target.startswith("/"):
            # origin-form; urlsplit would read "//host/x" as an authority
            path = target.split("?", 1)[0].split("#", 1)[0]
        else:
            path = urlsplit(target).path or "/"

        headers: dict[str, str] = {}
        for line in lines[1:]:
            if not line:
                continue
            if ":" not in line:
                raise HTTPRequestParseError("Malformed header line")
            name, value = line.split(":", 1)
            header_name = name.strip().lower()
            if not header_name:
                raise HTTPRequestParseError("Header name cannot be empty")
            headers[header_name] = value.strip()

        if "content-length" in headers:
            try:
                expected_body_length = int(headers["content-length"])
            except ValueError as exc:
                raise HTTPRequestParseError("Invalid Content-Length") from exc

            if expected_body_length < 0:
                raise HTTPRequestParseError("Negative Content-Length is invalid")

            if len(body) != expected_body_length:
                raise HTTPRequestParseError("Body length does not match Content-Length")

        if len(body) > MAX_BODY_BYTES:
            raise HTTPRequestParseError("Body exceeded MAX_BODY_BYTES", status_code=413)

        return cls(
            method=method.upper(),
            path=path,
            raw_target=target,
            http_version=http_version,
            headers=headers,
            body=body,
        )
