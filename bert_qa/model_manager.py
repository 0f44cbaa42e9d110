"""
@file: model_manager.py
Lazy, retrying acquisition of the ONNX model.

ModelManager starts one dedicated background thread that produces the model
handle and publishes it on a single shared future. Every caller awaits that
same future; nobody triggers a second load.

Acquisition:
1. If the artifact exists at MODEL.PATH, try to load it.
2. If it is missing, or loading fails for any reason, download it from
   MODEL.URL (retrying with a fixed delay) and load it again.
3. A load failure after a fresh download is fatal (ModelLoadError).

Example usage:
    manager = ModelManager(config, token)
    manager.start()
    handle = await manager.wait()
"""
import asyncio
import concurrent.futures
import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from bert_qa.cancellation import CancellationToken
from bert_qa.config import DEFAULTS
from bert_qa.download import DEFAULT_CHUNK_SIZE, DEFAULT_RETRY_DELAY, DEFAULT_TIMEOUT, download_file
from bert_qa.exceptions import ModelLoadError
from bert_qa.session import load_onnx_session

logger = logging.getLogger(__name__)

class AcquisitionState(Enum):
    CONSTRUCTED = "constructed"
    ACQUIRING = "acquiring"
    READY = "ready"
    FAILED = "failed"

class ModelManager:
    """
    Owns the single acquisition of the model handle.

    Args:
        config: Configuration object with get_nested (MODEL.* and DOWNLOAD.* keys).
        token: Cancellation token observed at acquisition and retry boundaries.
        loader: Callable building a handle from a path. Defaults to loading an ONNX session.
        downloader: Coroutine function with the signature of download_file.
        transport: Optional httpx transport passed to the downloader.
        sleep: Optional coroutine function used for the download backoff.
    """
    def __init__(
        self,
        config: Any,
        token: CancellationToken,
        loader: Callable[[str], Any] = None,
        downloader: Callable = download_file,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable = asyncio.sleep,
    ):
        self.url = config.get_nested('MODEL.URL', DEFAULTS['MODEL']['URL'])
        self.model_path = Path(config.get_nested('MODEL.PATH', DEFAULTS['MODEL']['PATH']))
        self.retry_delay = float(config.get_nested('DOWNLOAD.RETRY_DELAY', DEFAULT_RETRY_DELAY))
        self.chunk_size = int(config.get_nested('DOWNLOAD.CHUNK_SIZE', DEFAULT_CHUNK_SIZE))
        self.timeout = float(config.get_nested('DOWNLOAD.TIMEOUT', DEFAULT_TIMEOUT))
        self._token = token
        self._loader = loader or load_onnx_session
        self._downloader = downloader
        self._transport = transport
        self._sleep = sleep
        self._future: concurrent.futures.Future = concurrent.futures.Future()
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()
        self.state = AcquisitionState.CONSTRUCTED
        self.handles_created = 0
        self.downloads = 0

    @property
    def future(self) -> concurrent.futures.Future:
        return self._future

    def start(self) -> concurrent.futures.Future:
        """Start acquisition in the background, once. Returns the shared future."""
        with self._start_lock:
            if self._thread is None:
                # A running future cannot be cancelled by one of its waiters
                self._future.set_running_or_notify_cancel()
                self.state = AcquisitionState.ACQUIRING
                self._thread = threading.Thread(target=self._run, name="model-acquisition", daemon=True)
                self._thread.start()
        return self._future

    def _run(self) -> None:
        try:
            handle = asyncio.run(self._acquire())
        except Exception as e:
            self.state = AcquisitionState.FAILED
            logger.error(f"Model acquisition failed: {e!r}")
            self._future.set_exception(e)
        else:
            self.state = AcquisitionState.READY
            logger.info(f"Model ready ({self.model_path})")
            self._future.set_result(handle)

    def _load(self) -> Any:
        handle = self._loader(str(self.model_path))
        self.handles_created += 1
        return handle

    async def _acquire(self) -> Any:
        logger.info(f"Called ModelManager._acquire(model_path={self.model_path})")
        if self.model_path.exists():
            try:
                return self._load()
            except Exception as e:
                logger.info(f"Could not load {self.model_path} ({e}); downloading a fresh copy")
        else:
            logger.info(f"Model not found at {self.model_path}; downloading from {self.url}")

        self._token.raise_if_cancelled("acquisition")
        await self._downloader(
            self.url,
            str(self.model_path),
            self._token,
            retry_delay=self.retry_delay,
            chunk_size=self.chunk_size,
            timeout=self.timeout,
            transport=self._transport,
            sleep=self._sleep,
        )
        self.downloads += 1

        try:
            return self._load()
        except Exception as e:
            raise ModelLoadError(f"Failed to load model after download: {e}", path=str(self.model_path)) from e

    async def wait(self) -> Any:
        """Await the model handle without blocking the event loop. Starts acquisition if needed."""
        return await asyncio.wrap_future(self.start())

    def result(self, timeout: float = None) -> Any:
        """Block until the model handle is available."""
        return self.start().result(timeout)
