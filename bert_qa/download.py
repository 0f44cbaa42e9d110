"""
@file: download.py
Streaming download of the model artifact with fixed-delay retry.

The whole download is retried after any httpx error (connection failures,
timeouts, non-2xx responses, broken streams), waiting a fixed delay between
attempts and never giving up on its own. The only ways out are success, a
local file error, or cancellation, which is checked before every attempt and
before every backoff sleep.

Typical usage example:
    token = CancellationToken()
    size = await download_file(url, "model.onnx", token)
"""
import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx
import tenacity
from tenacity import AsyncRetrying, retry_if_exception_type, stop_never, wait_fixed

from bert_qa.cancellation import CancellationToken
from bert_qa.exceptions import DownloadError

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAY = 5
DEFAULT_CHUNK_SIZE = 1024 * 1024
DEFAULT_TIMEOUT = 60
PROGRESS_LOG_STEP = 50 * 1024 * 1024

async def _copy_to_file(response: httpx.Response, destination: Path, chunk_size: int) -> int:
    """Stream the response body into ``destination``, overwriting it. Returns bytes written."""
    total = response.headers.get("content-length")
    written = 0
    next_report = PROGRESS_LOG_STEP
    try:
        with open(destination, "wb") as f:
            async for chunk in response.aiter_bytes(chunk_size):
                f.write(chunk)
                written += len(chunk)
                if written >= next_report:
                    logger.info(f"Downloaded {written // (1024 * 1024)} MB of {int(total) // (1024 * 1024) if total else '?'} MB")
                    next_report += PROGRESS_LOG_STEP
    except OSError as e:
        raise DownloadError(f"Failed to write {destination}: {e}", url=str(response.url)) from e
    return written

async def download_file(
    source: str,
    destination: str,
    token: CancellationToken,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """
    Download ``source`` into ``destination``, retrying until it succeeds or is cancelled.

    Args:
        source: URL of the model artifact.
        destination: Local path, created or overwritten.
        token: Cancellation token checked before each attempt and each backoff.
        retry_delay: Seconds to wait between attempts.
        chunk_size: Bytes per streamed chunk.
        timeout: httpx timeout (seconds) for connect and each read.
        transport: Optional httpx transport (used by tests).
        sleep: Coroutine function used for the backoff wait.

    Returns:
        int: Number of bytes written.

    Raises:
        QACancelledError: If cancellation was requested.
        DownloadError: If the local file cannot be written.
    """
    logger.info(f"Called download_file(source={source}, destination={destination})")
    destination = Path(destination)
    if destination.parent and not destination.parent.exists():
        destination.parent.mkdir(parents=True, exist_ok=True)

    def before_retry(retry_state: tenacity.RetryCallState) -> None:
        error = retry_state.outcome.exception()
        logger.warning(
            f"Download attempt {retry_state.attempt_number} of {source} failed: {error!r}. "
            f"Retrying in {retry_delay} seconds..."
        )
        token.raise_if_cancelled("download retry")

    retrying = AsyncRetrying(
        retry=retry_if_exception_type(httpx.HTTPError),
        wait=wait_fixed(retry_delay),
        stop=stop_never,
        before_sleep=before_retry,
        sleep=sleep,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            token.raise_if_cancelled("download")
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport) as client:
                async with client.stream("GET", source) as response:
                    response.raise_for_status()
                    written = await _copy_to_file(response, destination, chunk_size)
    logger.info(f"Downloaded {written} bytes from {source} to {destination}")
    return written
