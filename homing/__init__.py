"""
homing - network client for device and asset tracking

Uploads evidence files to a collector and announces presence on the LAN,
both best-effort and bound by a deadline.
"""

__version__ = "1.0.0"

from .client import UploadRequest, post_files
from .config import (
    BUFFER_SIZE,
    DEFAULT_TIMEOUT,
    PIPE_CAPACITY,
    UDP_PORT,
)
from .crypto import decrypt, encrypt
from .discovery import BroadcastTarget, addr_to_broadcast, send_broadcast
from .errors import (
    AddressError,
    DeadlineExceededError,
    DecryptionError,
    FileOpenError,
    HomingError,
    InterfaceError,
    PartError,
    PipeClosedError,
    ProducerError,
    RequestError,
    SendError,
    StreamClosedError,
    TransportError,
)
from .errstream import ErrorStream, spawn
from .shred import srm
from .utils import deadline_in, domain_from_hostname, hostname_from_host, remaining

__all__ = [
    "BUFFER_SIZE",
    "DEFAULT_TIMEOUT",
    "PIPE_CAPACITY",
    "UDP_PORT",
    "ErrorStream",
    "spawn",
    "UploadRequest",
    "post_files",
    "BroadcastTarget",
    "addr_to_broadcast",
    "send_broadcast",
    "encrypt",
    "decrypt",
    "srm",
    "deadline_in",
    "remaining",
    "hostname_from_host",
    "domain_from_hostname",
    "HomingError",
    "StreamClosedError",
    "DeadlineExceededError",
    "RequestError",
    "TransportError",
    "ProducerError",
    "FileOpenError",
    "PartError",
    "PipeClosedError",
    "AddressError",
    "InterfaceError",
    "SendError",
    "DecryptionError",
]
