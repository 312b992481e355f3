"""Tests for the name resolution and transport probes."""

import socket

from transfercheck.schemas import StageKey
from transfercheck.services.health import probes
from tests.helpers import patch_network


def test_resolve_host_reports_address_and_family(monkeypatch):
    """A successful lookup should surface the first address and its family."""

    patch_network(monkeypatch, address="198.51.100.7")

    result = probes.resolve_host("files.example.com")

    assert result.key is StageKey.NAME_RESOLUTION
    assert result.ok is True
    assert result.message == "DNS resolved to 198.51.100.7"
    assert result.details == {"address": "198.51.100.7", "family": 4}
    assert result.elapsed_ms is not None and result.elapsed_ms >= 0


def test_resolve_host_failure_carries_resolver_text(monkeypatch):
    """Unknown hosts should become a failed stage, not an exception."""

    patch_network(
        monkeypatch,
        resolve_error=socket.gaierror(-2, "Name or service not known"),
    )

    result = probes.resolve_host("nope.invalid")

    assert result.ok is False
    assert result.message.startswith("DNS resolution failed:")
    assert "Name or service not known" in result.message
    assert result.details is None


def test_resolve_host_rejects_unencodable_names(monkeypatch):
    """IDNA encoding errors are resolution failures too."""

    patch_network(monkeypatch, resolve_error=UnicodeError("label too long"))

    result = probes.resolve_host("a" * 300)

    assert result.ok is False
    assert "label too long" in result.message


def test_probe_transport_closes_socket_on_success(monkeypatch):
    """The probe must close its connection immediately and exchange no data."""

    calls = patch_network(monkeypatch)

    result = probes.probe_transport("files.example.com", 2121, timeout=3)

    assert result.ok is True
    assert result.key is StageKey.TRANSPORT
    assert result.message == "TCP connection succeeded on files.example.com:2121"
    assert calls["connect"] == [(("files.example.com", 2121), 3)]
    assert all(sock.closed for sock in calls["sockets"])


def test_probe_transport_refusal_keeps_raw_error(monkeypatch):
    patch_network(
        monkeypatch,
        connect_error=ConnectionRefusedError(111, "Connection refused"),
    )

    result = probes.probe_transport("files.example.com", 21)

    assert result.ok is False
    assert "Connection refused" in result.message


def test_probe_transport_timeout_is_labelled(monkeypatch):
    patch_network(monkeypatch, connect_error=socket.timeout("timed out"))

    result = probes.probe_transport("files.example.com", 21, timeout=0.5)

    assert result.ok is False
    assert result.message == "TCP connect timeout"
