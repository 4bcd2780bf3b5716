# cws_client/services/poll_retry.py
"""
Poll-retry controller for asynchronous service operations

Certificate issuance on the service side is asynchronous: a download made
right after create/renew reports an error code in [200, 300) until the
certificate is ready. The controller re-invokes the operation at a fixed
interval while that "processing" code comes back, up to a bounded number of
attempts. Any other failure is terminal.

The controller is an explicit state machine. step() performs one attempt;
run() drives it with a blocking wait. An external scheduler can call step()
itself and honour next_delay between attempts.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from ..config import settings
from ..exceptions import RemoteOperationError
from ..models.responses import SelfDescribingResponse

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=SelfDescribingResponse)


class PollState(str, Enum):
    """States of one polled operation"""
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def is_processing(error_code: Optional[int]) -> bool:
    """
    Error codes in [200, 300) mean the request was received, understood and
    accepted, but the result is not ready yet.
    """
    return error_code is not None and 200 <= error_code < 300


class PollRetryController(Generic[T]):
    """Bounded fixed-interval retry around a single service operation"""

    def __init__(self,
                 operation: Callable[[], T],
                 max_attempts: int = settings.DOWNLOAD_MAX_ATTEMPTS,
                 interval: float = settings.DOWNLOAD_RETRY_INTERVAL):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if interval < 0:
            raise ValueError("interval can't be negative")

        self._operation = operation
        self.max_attempts = max_attempts
        self.interval = interval

        self.state = PollState.PENDING
        self.attempts = 0
        self.waits = 0
        self.last_response: Optional[T] = None
        self._wakeup = threading.Event()

    @property
    def next_delay(self) -> Optional[float]:
        """Seconds to wait before the next step(), None once finished"""
        if self.state is not PollState.PENDING:
            return None
        return self.interval if self.attempts else 0.0

    @property
    def error_message(self) -> Optional[str]:
        res = self.last_response
        if res is None or res.success:
            return None
        return res.error_details or f"Certificate Web service error (code: {res.error_code})"

    def step(self) -> PollState:
        """Invoke the operation once and move to the next state"""
        if self.state is not PollState.PENDING:
            raise RuntimeError(f"Operation already finished: {self.state.value}")

        res = self._operation()
        self.attempts += 1
        self.last_response = res

        if res.success:
            self.state = PollState.SUCCEEDED
            logger.debug(f"Operation succeeded after {self.attempts} attempt(s)")
        elif is_processing(res.error_code) and self.attempts < self.max_attempts:
            logger.info(f"{self.error_message}, retrying! "
                        f"(attempt {self.attempts}/{self.max_attempts})")
        else:
            self.state = PollState.FAILED
            logger.error(f"Operation failed after {self.attempts} attempt(s): "
                         f"code={res.error_code}, {self.error_message}")
        return self.state

    def wait(self) -> None:
        """Block for the retry interval; wakeup() cuts the wait short"""
        interrupted = self._wakeup.wait(self.interval)
        self._wakeup.clear()
        self.waits += 1
        if interrupted:
            logger.debug("Retry wait interrupted, proceeding with next attempt")

    def wakeup(self) -> None:
        """Proceed to the next attempt right away. This is not a cancellation."""
        self._wakeup.set()

    def result(self) -> T:
        """Successful response, or RemoteOperationError for a failed operation"""
        if self.state is PollState.SUCCEEDED:
            return self.last_response
        if self.state is PollState.FAILED:
            raise RemoteOperationError(self.error_message)
        raise RuntimeError("Operation is still pending")

    def run(self) -> T:
        while self.step() is PollState.PENDING:
            self.wait()
        return self.result()


def poll(operation: Callable[[], T],
         max_attempts: int = settings.DOWNLOAD_MAX_ATTEMPTS,
         interval: float = settings.DOWNLOAD_RETRY_INTERVAL) -> T:
    """Run operation under a fresh PollRetryController"""
    return PollRetryController(operation, max_attempts, interval).run()
