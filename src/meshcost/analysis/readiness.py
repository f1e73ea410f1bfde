"""
Readiness gate for the metrics backend.

Connectivity is brought up on a one-worker thread pool (typically a
kubectl port-forward that blocks while the tunnel lives). Each call gets
its own future, which carries at most one bring-up error back to the
caller; meanwhile the calling thread probes the backend on a fixed
interval until it answers or an error arrives.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Optional

import httpx

from ..core.exceptions import BackendUnreachableError, BringUpError

logger = logging.getLogger(__name__)


class ReadinessGate:
    """Blocks until the metrics backend answers a probe"""

    def __init__(self, endpoint: str, poll_interval: float = 0.5, max_retries: int = 1,
                 probe: Optional[Callable[[], bool]] = None,
                 probe_timeout: float = 2.0,
                 timeout: Optional[float] = None):
        self.endpoint = endpoint
        self.poll_interval = poll_interval
        self.max_retries = max_retries
        self.probe_timeout = probe_timeout
        self.timeout = timeout
        self._probe = probe or self._http_probe
        self.attempts = 0

    def _http_probe(self) -> bool:
        """Any HTTP response counts as reachable"""
        try:
            response = httpx.get(self.endpoint, timeout=self.probe_timeout)
        except httpx.HTTPError:
            return False
        logger.info(f"Prometheus is ready! (Code: {response.status_code})")
        return True

    def _bring_up_with_retry(self, bring_up: Callable[[], None]) -> None:
        while True:
            self.attempts += 1
            try:
                bring_up()
                return
            except BringUpError as e:
                error = e
            except Exception as e:
                error = BringUpError(f"bring-up failed: {e}")
                error.__cause__ = e

            retries_used = self.attempts - 1
            if error.transient and retries_used < self.max_retries:
                logger.warning(
                    f"Bring-up failed ({error}), retrying "
                    f"({retries_used + 1}/{self.max_retries})"
                )
                continue

            logger.error(f"Bring-up failed: {error} {error.output}".rstrip())
            raise error

    def _wait_for_error(self, future: Optional[Future]) -> Optional[Future]:
        """Wait one poll interval; raise a reported bring-up error.

        Returns the future to keep watching, or None once bring-up has
        finished without an error.
        """
        if future is None:
            time.sleep(self.poll_interval)
            return None

        done, _ = wait([future], timeout=self.poll_interval)
        if not done:
            return future
        error = future.exception()
        if error is not None:
            raise error
        return None

    def ensure_reachable(self, bring_up: Optional[Callable[[], None]] = None) -> None:
        """Start bring_up in the background and wait for the backend.

        Raises the bring-up error as soon as one is reported, or
        BackendUnreachableError once the optional timeout passes. Errors
        reported after this call returns are not seen by later calls.
        """
        self.attempts = 0
        future = None
        executor = None
        if bring_up is not None:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="meshcost-bring-up")
            future = executor.submit(self._bring_up_with_retry, bring_up)

        logger.info(f"Waiting for {self.endpoint} to be ready...")
        started = time.monotonic()
        try:
            while True:
                future = self._wait_for_error(future)

                if self._probe():
                    return

                waited = time.monotonic() - started
                if self.timeout is not None and waited >= self.timeout:
                    raise BackendUnreachableError(self.endpoint, waited)
        finally:
            if executor is not None:
                # the tunnel keeps running after the gate opens
                executor.shutdown(wait=False)
