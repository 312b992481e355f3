"""Reusable stubs for sockets, sessions and drivers."""

from __future__ import annotations

import contextlib
import socket


class FakeSocket:
    def __init__(self):
        self.closed = False

    def close(self) -> None:
        self.closed = True


def patch_network(
    monkeypatch,
    *,
    resolve_error: Exception | None = None,
    connect_error: Exception | None = None,
    address: str = "203.0.113.10",
):
    """Stub DNS and TCP so the first two stages never touch the network."""
    calls: dict[str, list] = {"resolve": [], "connect": [], "sockets": []}

    def fake_getaddrinfo(host, port, *args, **kwargs):
        calls["resolve"].append(host)
        if resolve_error is not None:
            raise resolve_error
        return [(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP, "", (address, 0))]

    def fake_create_connection(addr, timeout=None, *args, **kwargs):
        calls["connect"].append((addr, timeout))
        if connect_error is not None:
            raise connect_error
        sock = FakeSocket()
        calls["sockets"].append(sock)
        return sock

    monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
    monkeypatch.setattr(socket, "create_connection", fake_create_connection)
    return calls


class FakeSession:
    def __init__(self, entries: int = 3, error: Exception | None = None):
        self.entries = entries
        self.error = error
        self.paths: list = []

    def count_entries(self, path):
        self.paths.append(path)
        if self.error is not None:
            raise self.error
        return self.entries


class FakeDriver:
    """SessionDriverProtocol stub recording session lifecycle."""

    auth_pattern = r"auth|login|530|password|user"

    def __init__(
        self,
        *,
        connect_error: Exception | None = None,
        list_error: Exception | None = None,
        entries: int = 3,
        default_path: str | None = None,
        release_error: Exception | None = None,
    ):
        self.connect_error = connect_error
        self.release_error = release_error
        self.session = FakeSession(entries=entries, error=list_error)
        self.default_path = default_path
        self.opened = 0
        self.released = 0

    @contextlib.contextmanager
    def open_session(self, request):
        self.opened += 1
        try:
            if self.connect_error is not None:
                raise self.connect_error
            yield self.session
        finally:
            self.released += 1
            if self.release_error is not None:
                raise self.release_error

    def listing_path(self, request):
        return request.trimmed_path or self.default_path

    def transport_tips(self, message):
        return ["transport tip"]

    def session_tips(self, auth_shaped):
        return ["credential tip"] if auth_shaped else ["listing tip"]


class RecordingSink:
    def __init__(self):
        self.rows: list[list[str]] = []

    def append_row(self, fields) -> None:
        self.rows.append(list(fields))
