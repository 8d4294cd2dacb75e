"""
Presence announcement via UDP broadcast.

send_broadcast() sends one payload to the directed broadcast address of every
local interface that is up and broadcast-capable, on the port of the given
source address.  Failures are reported per destination on an ErrorStream:

    stream = send_broadcast("0.0.0.0:5001", b"HELLO", deadline=deadline_in(2))
    errors = stream.drain()

Only a write timeout stops the loop early; once the deadline has passed every
later send would time out as well.
"""

import ipaddress
import socket
from dataclasses import dataclass

import psutil

from .errors import (
    AddressError,
    DeadlineExceededError,
    InterfaceError,
    SendError,
)
from .errstream import ErrorStream, spawn
from .logging_config import get_logger
from .utils import remaining

logger = get_logger(__name__)


def addr_to_broadcast(address: str, netmask: str | None) -> str | None:
    """
    Directed broadcast address for *address*/*netmask*, e.g.
    ('192.168.1.5', '255.255.255.0') -> '192.168.1.255'.

    Returns None when either value is not a usable IPv4 address.
    """
    if not netmask:
        return None
    try:
        ip = ipaddress.IPv4Address(address)
        mask = ipaddress.IPv4Address(netmask)
    except ValueError:
        return None
    host_bits = ~int(mask) & 0xFFFFFFFF
    return str(ipaddress.IPv4Address(int(ip) | host_bits))


@dataclass(frozen=True)
class BroadcastTarget:
    """One IPv4 address assigned to an eligible interface."""

    interface: str
    address: str
    netmask: str

    @property
    def broadcast(self) -> str | None:
        return addr_to_broadcast(self.address, self.netmask)


def _is_eligible(stats, addrs) -> bool:
    """Up and broadcast-capable."""
    if not stats.isup:
        return False
    flags = getattr(stats, "flags", "")
    if flags:
        return "broadcast" in flags.split(",")
    # No flag information on this platform: trust the address table instead.
    return any(getattr(a, "broadcast", None) for a in addrs or ())


def iter_targets(stream: ErrorStream):
    """
    Yield a BroadcastTarget for each IPv4 address of each eligible interface,
    in enumeration order.

    An interface missing from the address table is reported on *stream* and
    skipped.  A failure to enumerate at all raises InterfaceError.
    """
    try:
        all_stats = psutil.net_if_stats()
        all_addrs = psutil.net_if_addrs()
    except (psutil.Error, OSError) as e:
        raise InterfaceError(None, e)

    for name, stats in all_stats.items():
        addrs = all_addrs.get(name)
        if not _is_eligible(stats, addrs):
            continue
        if addrs is None:
            stream.put(InterfaceError(name, LookupError("no addresses reported")))
            continue
        for addr in addrs:
            if addr.family != socket.AF_INET or not addr.netmask:
                continue
            yield BroadcastTarget(name, addr.address, addr.netmask)


def _resolve(address: str) -> tuple[str, int]:
    """Split and resolve a 'host:port' source address (IPv4 only)."""
    host, sep, port_str = address.rpartition(":")
    if not sep:
        raise AddressError(address, ValueError("missing port"))
    try:
        port = int(port_str)
    except ValueError as e:
        raise AddressError(address, e)
    if not 0 <= port <= 65535:
        raise AddressError(address, ValueError(f"port out of range: {port}"))
    if not host:
        return "0.0.0.0", port
    try:
        info = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as e:
        raise AddressError(address, e)
    return info[0][4][0], port


def send_broadcast(
    address: str,
    payload: bytes,
    *,
    deadline: float,
    conn: socket.socket | None = None,
) -> ErrorStream:
    """
    Broadcast *payload* on every eligible interface before *deadline*.

    *address* ('host:port') supplies the destination port and, when *conn*
    is None, the local address to bind a temporary socket to.  A supplied
    *conn* is left open.
    """
    return spawn(run_broadcast, address, payload, deadline, conn)


def run_broadcast(
    stream: ErrorStream,
    address: str,
    payload: bytes,
    deadline: float,
    conn: socket.socket | None = None,
) -> None:
    """Perform one broadcast, reporting into *stream*.  Does not close it."""
    if remaining(deadline) <= 0:
        stream.put(DeadlineExceededError("deadline already passed"))
        return

    try:
        host, port = _resolve(address)
    except AddressError as e:
        stream.put(e)
        return

    owns_conn = conn is None
    if owns_conn:
        try:
            conn = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as e:
            stream.put(AddressError(address, e))
            return
    previous_timeout = conn.gettimeout()
    try:
        conn.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        if owns_conn:
            conn.bind((host, 0))
    except OSError as e:
        stream.put(AddressError(address, e))
        _release(conn, owns_conn, previous_timeout)
        return

    try:
        _send_all(stream, conn, port, payload, deadline)
    finally:
        _release(conn, owns_conn, previous_timeout)


def _release(conn: socket.socket, owned: bool, previous_timeout) -> None:
    if owned:
        conn.close()
    else:
        conn.settimeout(previous_timeout)


def _send_all(
    stream: ErrorStream,
    conn: socket.socket,
    port: int,
    payload: bytes,
    deadline: float,
) -> None:
    try:
        targets = iter_targets(stream)
        sent = 0
        for target in targets:
            broadcast = target.broadcast
            if broadcast is None:
                continue
            destination = (broadcast, port)
            try:
                left = remaining(deadline)
                if left <= 0:
                    raise TimeoutError("write deadline exceeded")
                conn.settimeout(left)
                conn.sendto(payload, destination)
            except OSError as e:
                err = SendError(destination, e)
                stream.put(err)
                if err.is_timeout:
                    return
            else:
                sent += 1
                logger.debug(f"Broadcast {len(payload)} bytes to {broadcast}:{port} via {target.interface}")
    except InterfaceError as e:
        stream.put(e)
        return
    logger.debug(f"Broadcast finished [{sent} destination(s)]")
