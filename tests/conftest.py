"""Shared pytest fixtures and helpers."""

import re
import socket
from collections import namedtuple

import pytest

# Stand-ins for psutil's snicstats / snicaddr records.
FakeStats = namedtuple("FakeStats", ["isup", "flags"])
FakeAddr = namedtuple("FakeAddr", ["family", "address", "netmask", "broadcast", "ptp"])


def inet(address, netmask, broadcast=None):
    return FakeAddr(socket.AF_INET, address, netmask, broadcast, None)


def inet6(address, netmask="ffff:ffff:ffff:ffff::"):
    return FakeAddr(socket.AF_INET6, address, netmask, None, None)


def parse_multipart(body: bytes, content_type: str) -> list[dict]:
    """
    Split a multipart/form-data body into its parts.

    Returns [{"name", "filename", "content", "headers"}, ...] in body order.
    """
    boundary = content_type.split("boundary=", 1)[1].encode("ascii")
    delimiter = b"--" + boundary
    assert body.endswith(delimiter + b"--\r\n")

    parts = []
    for section in body.split(delimiter)[1:-1]:
        assert section.startswith(b"\r\n") and section.endswith(b"\r\n")
        head, _, content = section[2:-2].partition(b"\r\n\r\n")
        headers = dict(line.split(": ", 1) for line in head.decode("utf-8", "surrogateescape").split("\r\n"))
        disposition = headers["Content-Disposition"]
        parts.append({
            "name": re.search(r' name="([^"]*)"', disposition).group(1),
            "filename": re.search(r' filename="([^"]*)"', disposition).group(1),
            "content": content,
            "headers": headers,
        })
    return parts


class FakeSocket:
    """Records datagrams instead of sending them."""

    def __init__(self, failures=None):
        self.sent = []
        self.timeouts = []
        self.options = {}
        self.closed = False
        self._timeout = 7.5
        self._failures = failures or {}

    def gettimeout(self):
        return self._timeout

    def settimeout(self, value):
        self._timeout = value
        self.timeouts.append(value)

    def setsockopt(self, level, option, value):
        self.options[(level, option)] = value

    def bind(self, address):
        raise AssertionError("caller-supplied sockets must not be rebound")

    def sendto(self, data, destination):
        failure = self._failures.get(destination[0])
        if failure is not None:
            raise failure
        self.sent.append((data, destination))
        return len(data)

    def close(self):
        self.closed = True


@pytest.fixture
def sample_files(tmp_path):
    """Three small files with distinct contents."""
    paths = []
    for name, content in (
        ("alpha.txt", b"first file\n"),
        ("beta.bin", bytes(range(256)) * 4),
        ("gamma.log", b"third\r\n\r\nwith blank lines"),
    ):
        path = tmp_path / name
        path.write_bytes(content)
        paths.append(path)
    return paths
