"""Tests for the server entry point's bind guard."""

from __future__ import annotations

import pytest

from rumo.core.server import main


class TestLoopbackHost:
    @pytest.mark.parametrize("host", ["127.0.0.1", "::1", "localhost"])
    def test_loopback(self, host):
        assert main._is_loopback_host(host) is True

    @pytest.mark.parametrize("host", ["0.0.0.0", "192.168.1.10", "example.com"])
    def test_not_loopback(self, host):
        assert main._is_loopback_host(host) is False


class TestRun:
    def test_refuses_public_bind(self, monkeypatch):
        monkeypatch.setenv("RUMO_HOST", "0.0.0.0")
        monkeypatch.setenv("RUMO_ALLOW_INSECURE_BIND", "false")

        def _fail_create_app():
            raise AssertionError("server must not be built")

        monkeypatch.setattr(main, "create_app", _fail_create_app)
        with pytest.raises(RuntimeError, match="RUMO_ALLOW_INSECURE_BIND"):
            main.run()

    def test_override_allows_public_bind(self, monkeypatch):
        monkeypatch.setenv("RUMO_HOST", "0.0.0.0")
        monkeypatch.setenv("RUMO_ALLOW_INSECURE_BIND", "true")
        monkeypatch.setenv("RUMO_PORT", "8003")
        runs = []

        class _FakeServer:
            def run(self, **kwargs):
                runs.append(kwargs)

        monkeypatch.setattr(main, "create_app", _FakeServer)
        main.run()
        assert runs == [{"transport": "streamable-http", "host": "0.0.0.0", "port": 8003}]
