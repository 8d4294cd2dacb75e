"""
HTTP uploader: streams evidence files to a collector as one multipart POST.

A producer thread encodes the files into a bounded Pipe while httpx sends the
pipe's read end as a chunked request body.  Files therefore never need to fit
in memory, and the transport starts sending before the last file is read.

All outcomes are reported through the ErrorStream returned by post_files():
  - an empty stream means every file was delivered;
  - FileOpenError entries (ignore_file_open_error=True) mean those files were
    skipped but the rest were delivered;
  - any other error is fatal and is the last thing reported.
"""

import gzip
import os
import queue
import shutil
import threading
from dataclasses import dataclass
from typing import Sequence

import httpx

from .config import BUFFER_SIZE
from .errors import (
    DeadlineExceededError,
    FileOpenError,
    HomingError,
    PartError,
    ProducerError,
    RequestError,
    TransportError,
)
from .errstream import ErrorStream, spawn
from .logging_config import get_logger
from .protocol import MultipartWriter, Pipe
from .utils import remaining

logger = get_logger(__name__)


@dataclass(frozen=True)
class UploadRequest:
    """Everything one upload needs.  Built per call and used once."""

    files: Sequence[str]
    url: str
    deadline: float
    client: httpx.Client | None = None
    ignore_file_open_error: bool = False
    compress: bool = False


def post_files(
    url: str,
    files: Sequence[str],
    *,
    deadline: float,
    client: httpx.Client | None = None,
    ignore_file_open_error: bool = False,
    compress: bool = False,
) -> ErrorStream:
    """
    Upload *files* to *url* before *deadline* (a time.time() timestamp).

    Each file becomes the form field ``file<index>`` named after its base
    name; with *compress* its content is gzip-compressed.  Returns an
    ErrorStream which closes once the upload is completely accounted for.
    """
    request = UploadRequest(
        files=list(files),
        url=url,
        deadline=deadline,
        client=client,
        ignore_file_open_error=ignore_file_open_error,
        compress=compress,
    )
    return spawn(run_upload, request)


def run_upload(stream: ErrorStream, request: UploadRequest) -> None:
    """Perform *request*, reporting into *stream*.  Does not close the stream."""
    if remaining(request.deadline) <= 0:
        stream.put(DeadlineExceededError("deadline already passed"))
        return

    try:
        url = httpx.URL(request.url)
    except httpx.InvalidURL as e:
        stream.put(RequestError(f"invalid url {request.url!r}", e))
        return
    if url.scheme not in ("http", "https") or not url.host:
        stream.put(RequestError(f"unsupported url {request.url!r}"))
        return

    owns_client = request.client is None
    client = httpx.Client() if owns_client else request.client
    try:
        _upload(stream, request, client, url)
    finally:
        if owns_client:
            client.close()


def _upload(
    stream: ErrorStream,
    request: UploadRequest,
    client: httpx.Client,
    url: httpx.URL,
) -> None:
    pipe = Pipe()
    writer = MultipartWriter(pipe)
    done: queue.Queue = queue.Queue(maxsize=1)

    producer = threading.Thread(
        target=_produce,
        args=(stream, request, pipe, writer, done),
        name="homing-multipart",
        daemon=True,
    )

    timeout = httpx.Timeout(max(remaining(request.deadline), 0.001))
    http_request = client.build_request(
        "POST",
        url,
        content=pipe.iter_chunks(request.deadline),
        headers={"Content-Type": writer.content_type},
        timeout=timeout,
    )

    logger.debug(f"Uploading {len(request.files)} file(s) to {url} [compress={request.compress}]")
    producer.start()

    transport_error: HomingError | None = None
    try:
        response = client.send(http_request, stream=True)
        try:
            _await_response(response, request.deadline)
        finally:
            response.close()
        logger.debug(f"Collector answered {response.status_code}")
    except DeadlineExceededError as e:
        transport_error = e
    except httpx.TimeoutException as e:
        transport_error = DeadlineExceededError("deadline exceeded during upload", e)
    except (httpx.HTTPError, OSError) as e:
        transport_error = TransportError(f"upload to {url} failed: {e}", e)
    except ProducerError:
        # The producer aborted the body with its own error; it is reported below.
        pass
    finally:
        pipe.close_reader()
        producer_error = done.get()
        producer.join()

    if transport_error is not None:
        stream.put(transport_error)
    elif producer_error is not None:
        stream.put(producer_error)


def _await_response(response: httpx.Response, deadline: float) -> None:
    """Read the response to the end, failing once *deadline* has passed."""
    if remaining(deadline) <= 0:
        raise DeadlineExceededError("deadline exceeded awaiting response")
    for _ in response.iter_raw(BUFFER_SIZE):
        if remaining(deadline) <= 0:
            raise DeadlineExceededError("deadline exceeded reading response")


def _produce(
    stream: ErrorStream,
    request: UploadRequest,
    pipe: Pipe,
    writer: MultipartWriter,
    done: queue.Queue,
) -> None:
    """Encode every file into *pipe*; hand the terminal error to *done*."""
    error: BaseException | None = None
    try:
        for index, path in enumerate(request.files):
            _write_part(stream, request, writer, index, path)
        writer.close()
    except HomingError as e:
        error = e
    except BaseException as e:
        error = ProducerError(f"multipart producer failed: {e}", e)
    finally:
        pipe.close_writer(error)
        done.put(error)


def _write_part(
    stream: ErrorStream,
    request: UploadRequest,
    writer: MultipartWriter,
    index: int,
    path: str,
) -> None:
    try:
        f = open(path, "rb")
    except OSError as e:
        err = FileOpenError(path, index, e)
        if request.ignore_file_open_error:
            stream.put(err)
            return
        raise err

    with f:
        try:
            part = writer.create_form_file(f"file{index}", os.path.basename(path))
            if request.compress:
                with gzip.GzipFile(fileobj=part, mode="wb") as compressor:
                    shutil.copyfileobj(f, compressor, BUFFER_SIZE)
            else:
                shutil.copyfileobj(f, part, BUFFER_SIZE)
        except ProducerError:
            raise
        except Exception as e:
            raise PartError(path, e)

    logger.debug(f"Streamed file{index} {path}")
