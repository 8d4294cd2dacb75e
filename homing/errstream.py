"""
Error streams: the "attempt everything, report everything" result type.

An operation that fans out over several files or interfaces does not return a
single outcome.  Instead it writes zero or more exceptions to an ErrorStream
and closes it when all work is finished or abandoned.  The caller iterates the
stream; exhaustion is the one and only completion signal.

    stream = post_files(url, paths, deadline=deadline_in(30))
    for err in stream:          # blocks until the next error or closure
        print(err)
"""

import queue
import threading

from typing_extensions import Callable

from .errors import HomingError, StreamClosedError

_CLOSED = object()


class ErrorStream:
    """A finite, single-reader, thread-safe sequence of exceptions."""

    def __init__(self):
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._closed = False
        self._exhausted = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, error: BaseException) -> None:
        """Report *error*.  Raises StreamClosedError once the stream is closed."""
        with self._lock:
            if self._closed:
                raise StreamClosedError(f"error reported after close: {error!r}")
            self._queue.put(error)

    def close(self) -> None:
        """Mark the stream finished.  Must be called exactly once."""
        with self._lock:
            if self._closed:
                raise StreamClosedError("stream closed twice")
            self._closed = True
            self._queue.put(_CLOSED)

    def __iter__(self):
        while not self._exhausted:
            item = self._queue.get()
            if item is _CLOSED:
                self._exhausted = True
                return
            yield item

    def drain(self) -> list[BaseException]:
        """Block until the stream closes and return every reported error."""
        return list(self)


def spawn(target: Callable[..., None], *args, **kwargs) -> ErrorStream:
    """
    Run ``target(stream, *args, **kwargs)`` on a daemon thread.

    The returned stream is closed when *target* returns or raises, so the
    target itself must never close it.  An exception escaping *target* is
    reported on the stream as its last error.
    """
    stream = ErrorStream()
    name = getattr(target, "__name__", "operation")

    def runner() -> None:
        try:
            target(stream, *args, **kwargs)
        except HomingError as e:
            stream.put(e)
        except BaseException as e:
            stream.put(HomingError(f"{name} failed: {e!r}", e))
        finally:
            stream.close()

    threading.Thread(target=runner, name=f"homing-{name}", daemon=True).start()
    return stream
