"""Main HTTP server entry point and connection lifecycle orchestration."""

from __future__ import annotations

import argparse
import logging
import socket
import sys
from collections.abc import Sequence

from config import (
    ACCEPT_TIMEOUT_SECS,
    LISTEN_BACKLOG,
    LOG_FORMAT,
    PORT,
    SOCKET_TIMEOUT_SECS,
    ServerConfig,
    normalize_root,
)
from handlers.static_files import serve_static
from request import HTTPRequest, HTTPRequestParseError
from response import REASON_PHRASES, HTTPResponse
from socket_handler import (
    HeaderTooLargeError,
    HTTPReadError,
    MalformedRequestError,
    PayloadTooLargeError,
    SocketTimeoutError,
    UnsupportedTransferEncodingError,
    read_http_request,
    write_http_response_message,
)
from thread_pool import ThreadPool

logger = logging.getLogger(__name__)

READ_ERROR_STATUS: dict[type[HTTPReadError], int] = {
    PayloadTooLargeError: 413,
    HeaderTooLargeError: 431,
    SocketTimeoutError: 408,
    UnsupportedTransferEncodingError: 501,
    MalformedRequestError: 400,
}


class FileServer:
    """Serves files beneath ``config.root`` on a fixed-size worker pool."""

    def __init__(self, config: ServerConfig | None = None) -> None:
        self.config = config or ServerConfig()
        self.host = self.config.host
        self.port = self.config.port
        self.root = self.config.root

        self._server_socket: socket.socket | None = None
        self._pool: ThreadPool | None = None
        self._running = False

    def start(self) -> None:
        """Bind, announce, and serve until ``stop`` is called."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            self._server_socket = server_socket
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(LISTEN_BACKLOG)
            server_socket.settimeout(ACCEPT_TIMEOUT_SECS)
            self._pool = ThreadPool(
                worker_count=self.config.worker_count,
                queue_size=self.config.request_queue_size,
                handler=self._handle_client,
            )
            self._pool.start()
            self._running = True
            self.port = server_socket.getsockname()[1]

            print(f"Serving {self.root} on http://{self.host}:{self.port}", flush=True)
            logger.info(
                "Listening on %s:%s with %d workers",
                self.host,
                self.port,
                self.config.worker_count,
            )

            try:
                while self._running:
                    try:
                        client_socket, address = server_socket.accept()
                    except socket.timeout:
                        continue
                    except OSError:
                        break

                    if self._pool is None or not self._pool.submit(client_socket, address):
                        self._send_queue_full_response(client_socket)
            finally:
                if self._pool is not None:
                    self._pool.shutdown()
                    self._pool = None

    def stop(self) -> None:
        self._running = False
        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None
        if self._pool is not None:
            self._pool.shutdown()
            self._pool = None

    def _send_queue_full_response(self, client_socket: socket.socket) -> None:
        logger.warning("Worker queue full, rejecting connection")
        with client_socket:
            response = HTTPResponse(status_code=503, body="Service Unavailable")
            try:
                write_http_response_message(client_socket, response)
            except OSError as exc:
                logger.debug("Could not send 503: %s", exc)

    def _handle_client(self, client_socket: socket.socket, address: tuple[str, int]) -> None:
        with client_socket:
            client_socket.settimeout(SOCKET_TIMEOUT_SECS)
            response = self._read_and_dispatch(client_socket, address)
            if response is None:
                return

            try:
                write_http_response_message(client_socket, response)
            except OSError as exc:
                logger.warning(
                    "Aborted response to %s (status %s): %s",
                    address[0],
                    response.status_code,
                    exc,
                )

    def _read_and_dispatch(
        self,
        client_socket: socket.socket,
        address: tuple[str, int],
    ) -> HTTPResponse | None:
        try:
            raw_request = read_http_request(client_socket)
        except HTTPReadError as exc:
            status_code = READ_ERROR_STATUS.get(type(exc), 400)
            logger.debug("Unreadable request from %s: %s", address[0], exc)
            return HTTPResponse(status_code=status_code, body=REASON_PHRASES[status_code])
        except OSError as exc:
            logger.debug("Connection from %s failed while reading: %s", address[0], exc)
            return None

        if not raw_request:
            return None

        try:
            request = HTTPRequest.from_bytes(raw_request)
        except HTTPRequestParseError as exc:
            logger.debug("Rejected request from %s: %s", address[0], exc)
            return HTTPResponse(
                status_code=exc.status_code,
                body=REASON_PHRASES.get(exc.status_code, "Bad Request"),
            )

        return self._dispatch(request)

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        try:
            return serve_static(request, self.root)
        except Exception:
            logger.exception("Unhandled error serving %s", request.path)
            return HTTPResponse(status_code=500, body="Internal Server Error")


def _root_directory(value: str) -> str:
    root = normalize_root(value)
    if not root.is_dir():
        raise argparse.ArgumentTypeError(f"not a directory: {value}")
    return str(root)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve static files over HTTP")
    parser.add_argument("port", nargs="?", type=int, default=PORT)
    parser.add_argument("root", nargs="?", type=_root_directory, default=".")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        config = ServerConfig(port=args.port, root=args.root)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    server = FileServer(config)
    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()
    except OSError as exc:
        logger.error("Could not serve on port %s: %s", config.port, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
