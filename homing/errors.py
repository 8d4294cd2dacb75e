"""
Exception types reported on error streams.

Operations in this package never raise to the caller; each failure is wrapped
in one of these classes and delivered through an ErrorStream.  The wrapped
low-level exception is kept both as ``cause`` and as ``__cause__``.
"""


class HomingError(Exception):
    """Base class for every error this package reports."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class StreamClosedError(HomingError):
    """Raised on put() or close() against an already closed ErrorStream."""


class DeadlineExceededError(HomingError):
    """The operation's deadline passed before (or while) doing I/O."""


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------


class RequestError(HomingError):
    """The upload request could not be constructed (bad URL or scheme)."""


class TransportError(HomingError):
    """The HTTP round trip failed.  Fatal."""


class ProducerError(HomingError):
    """Raised by the multipart producer thread."""


class FileOpenError(ProducerError):
    """
    An input file could not be opened.

    Recoverable when the upload ignores open errors (the file is skipped),
    fatal otherwise.
    """

    def __init__(self, path: str, index: int, cause: BaseException | None = None):
        super().__init__(f"cannot open file{index} {path!r}: {cause}", cause)
        self.path = path
        self.index = index


class PartError(ProducerError):
    """Reading, compressing or writing one part failed.  Fatal."""

    def __init__(self, path: str, cause: BaseException | None = None):
        super().__init__(f"failed to stream {path!r}: {cause}", cause)
        self.path = path


class PipeClosedError(ProducerError):
    """The other end of the pipe went away."""


# ---------------------------------------------------------------------------
# Broadcast
# ---------------------------------------------------------------------------


class AddressError(HomingError):
    """The source address could not be parsed or resolved.  Fatal."""

    def __init__(self, address: str, cause: BaseException | None = None):
        super().__init__(f"invalid address {address!r}: {cause}", cause)
        self.address = address


class InterfaceError(HomingError):
    """
    Interface enumeration failed.

    With ``interface`` set only that interface was skipped; without it the
    whole enumeration failed and the broadcast was aborted.
    """

    def __init__(self, interface: str | None, cause: BaseException | None = None):
        where = f"interface {interface!r}" if interface else "interfaces"
        super().__init__(f"cannot enumerate {where}: {cause}", cause)
        self.interface = interface


class SendError(HomingError):
    """A datagram could not be sent to one broadcast destination."""

    def __init__(self, destination: tuple[str, int], cause: BaseException | None = None):
        host, port = destination
        super().__init__(f"send to {host}:{port} failed: {cause}", cause)
        self.destination = destination

    @property
    def is_timeout(self) -> bool:
        return isinstance(self.cause, TimeoutError)


# ---------------------------------------------------------------------------
# Crypto
# ---------------------------------------------------------------------------


class DecryptionError(HomingError):
    """Ciphertext failed authentication (wrong password or tampered data)."""
