"""
Drives a provider's text stream into a callback.

Every provider yields plain text fragments from its own SDK stream shape
(event-tagged deltas, text accessors or choice arrays).
This module turns that into one contract: ``emit`` is called once per fragment,
in order, on the calling thread, and the call ends either normally or with a
single wrapped error.

When a cancellation event is given, fragments are pulled on a worker thread so
that a stalled backend can't hold up cancellation: the caller returns as soon
as the event is set, and the provider's open HTTP stream is closed.
"""

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterable, Iterator

from ..errors import AskError, BackendError, CancellationError

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]

# how often a waiting caller checks for cancellation
POLL_INTERVAL = 0.05
# how long a canceled call waits for the worker to wind down
JOIN_TIMEOUT = 0.25

_DONE = object()


class StreamCloser:
    """Closes a provider's open HTTP stream from another thread.

    Providers register the ``close`` of their SDK stream once it is open.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self.closed = False

    def register(self, close: Callable[[], None]) -> None:
        with self._lock:
            if not self.closed:
                self._callbacks.append(close)
                return
        # already canceled before the stream was opened
        self._call(close)

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
            callbacks, self._callbacks = self._callbacks, []
        for close in callbacks:
            self._call(close)

    @staticmethod
    def _call(close: Callable[[], None]) -> None:
        try:
            close()
        except Exception as e:
            logger.debug(f"Error closing stream: {e}")


def _close_iterator(it: Iterator[str]) -> None:
    close = getattr(it, "close", None)
    if close is not None:
        close()


def _pull(it: Iterator[str], out: queue.Queue, stop: threading.Event) -> None:
    """Worker: move fragments from ``it`` to ``out`` until done or stopped."""
    try:
        for chunk in it:
            if stop.is_set():
                break
            out.put((chunk, None))
        out.put((_DONE, None))
    except BaseException as e:
        # handed to the caller, which decides how to report it
        out.put((_DONE, e))
    finally:
        _close_iterator(it)


def run_streaming(
    provider: str,
    chunks: Iterable[str],
    emit: Emit,
    cancel: threading.Event | None = None,
    closer: StreamCloser | None = None,
) -> None:
    """Pull fragments from ``chunks`` and pass each non-empty one to ``emit``.

    Fragments already emitted stay emitted if the stream fails later.

    Raises:
        BackendError: pulling the next fragment failed
        CancellationError: ``cancel`` was set, or the pull was interrupted with Ctrl-C
    """
    start_time = time.time()
    first_token_time = None

    def on_chunk(chunk: str) -> None:
        nonlocal first_token_time
        if first_token_time is None:
            first_token_time = time.time()
        emit(chunk)

    try:
        if cancel is None:
            _run_inline(provider, iter(chunks), on_chunk)
        else:
            _run_cancelable(provider, iter(chunks), on_chunk, cancel, closer)
    finally:
        if first_token_time:
            end_time = time.time()
            logger.debug(
                f"Generation finished in {end_time - start_time:.1f}s "
                f"(ttft: {first_token_time - start_time:.2f}s)"
            )


def _run_inline(provider: str, it: Iterator[str], emit: Emit) -> None:
    try:
        while True:
            try:
                chunk = next(it)
            except StopIteration:
                break
            except KeyboardInterrupt as e:
                raise CancellationError(provider) from e
            except AskError:
                raise
            except Exception as e:
                raise BackendError(provider, e) from e
            if chunk:
                emit(chunk)
    finally:
        # release the underlying HTTP stream on every exit path
        _close_iterator(it)


def _run_cancelable(
    provider: str,
    it: Iterator[str],
    emit: Emit,
    cancel: threading.Event,
    closer: StreamCloser | None,
) -> None:
    out: queue.Queue = queue.Queue()
    stop = threading.Event()
    worker = threading.Thread(
        target=_pull, args=(it, out, stop), name=f"{provider}-stream", daemon=True
    )
    worker.start()
    try:
        while True:
            if cancel.is_set():
                raise CancellationError(provider)
            try:
                chunk, error = out.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue
            except KeyboardInterrupt as e:
                raise CancellationError(provider) from e
            if chunk is _DONE:
                if error is not None:
                    if cancel.is_set():
                        # the stream failed because it was closed under it
                        raise CancellationError(provider) from error
                    if isinstance(error, AskError) or not isinstance(error, Exception):
                        raise error
                    raise BackendError(provider, error) from error
                break
            if not chunk:
                continue
            if cancel.is_set():
                raise CancellationError(provider)
            emit(chunk)
    finally:
        stop.set()
        if worker.is_alive():
            if closer is not None:
                closer.close()
            worker.join(JOIN_TIMEOUT)
