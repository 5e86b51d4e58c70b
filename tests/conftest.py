"""Shared fixtures: a one-connection loopback server speaking raw bytes."""

import logging
import socket
import threading

import pytest

from legacy_ping import logger


class OneShotServer:
    """Accept one connection, read the 2-byte probe, send *reply*.

    With ``hold_open`` the connection stays open after the reply until
    ``release`` is set, so the client has to time out on its own.
    """

    def __init__(self, reply, hold_open=False):
        self.reply = reply
        self.hold_open = hold_open
        self.received = b""
        self.release = threading.Event()
        self.sock = socket.create_server(("127.0.0.1", 0))
        self.address = self.sock.getsockname()[:2]
        self.thread = threading.Thread(target=self._serve, daemon=True)
        self.thread.start()

    def _serve(self):
        try:
            conn, _ = self.sock.accept()
        except OSError:
            return
        with conn:
            conn.settimeout(5)
            while len(self.received) < 2:
                chunk = conn.recv(2 - len(self.received))
                if not chunk:
                    break
                self.received += chunk
            conn.sendall(self.reply)
            if self.hold_open:
                self.release.wait(5)

    def close(self):
        self.release.set()
        self.sock.close()
        self.thread.join(5)


@pytest.fixture
def legacy_server():
    servers = []

    def start(reply, hold_open=False):
        server = OneShotServer(reply, hold_open=hold_open)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()


@pytest.fixture
def closed_port():
    """A loopback port with nothing listening on it."""
    sock = socket.create_server(("127.0.0.1", 0))
    address = sock.getsockname()[:2]
    sock.close()
    return address


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging() so tests stay independent."""
    yield
    root = logging.getLogger()
    while logger._installed:
        handler = logger._installed.pop()
        root.removeHandler(handler)
        handler.close()
