import asyncio
from typing import Awaitable, Callable, Dict, Optional, TypeVar

import httpx
from httpx import HTTPStatusError, TimeoutException

from app.core.exceptions import APIClientError, APITimeoutError, AppError, ValidationError
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")

STATUS_MESSAGES: Dict[int, str] = {
    400: "Bad Request - คำขอไม่ถูกต้อง",
    401: "Unauthorized - ไม่มีสิทธิ์เข้าถึง",
    403: "Forbidden - ถูกปฏิเสธการเข้าถึง",
    404: "Not Found - ไม่พบข้อมูลที่ร้องขอ",
    429: "Too Many Requests - คำขอมากเกินไป",
    500: "Internal Server Error - เซิร์ฟเวอร์เกิดข้อผิดพลาด",
    502: "Bad Gateway - เกตเวย์เกิดข้อผิดพลาด",
    503: "Service Unavailable - บริการไม่พร้อมใช้งาน",
    504: "Gateway Timeout - เกตเวย์หมดเวลา",
}


def status_error_message(status_code: int) -> str:
    return STATUS_MESSAGES.get(status_code, f"Unknown status code: {status_code}")


class BaseHTTPClient:
    """Base client for multi-step HTTP exchanges.

    Wraps each step in a retry loop with a linearly growing delay
    (``attempt * retry_delay``) and turns httpx failures into the
    application's exception types. Input validation errors are never retried.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize the client.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per step
            retry_delay: Base delay in seconds, multiplied by the attempt number
            sleep: Awaitable used between attempts (tests pass a no-op)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._sleep = sleep or asyncio.sleep
        self.logger = LOGGER

    async def with_retries(self, step: str, request_fn: Callable[[], Awaitable[T]]) -> T:
        """Run ``request_fn`` until it succeeds or attempts are exhausted.

        Raises:
            APIClientError: If the step fails after retries
            APITimeoutError: If the last attempt timed out
        """
        for attempt in range(self.max_retries):
            try:
                return await request_fn()

            except ValidationError:
                raise

            except HTTPStatusError as e:
                await self._handle_http_error(e, attempt, step)

            except TimeoutException as e:
                await self._handle_timeout_error(e, attempt, step)

            except Exception as e:
                await self._handle_generic_error(e, attempt, step)

        raise APIClientError(f"{step} failed after {self.max_retries} attempts")

    async def _handle_http_error(self, error: HTTPStatusError, attempt: int, step: str):
        """Handle HTTP status errors."""
        status_code = error.response.status_code
        message = f"HTTP {status_code}: {status_error_message(status_code)}"

        self.logger.warning(
            f"HTTP error (Attempt {attempt + 1}/{self.max_retries})",
            extra={"step": step, "status_code": status_code, "error_body": error.response.text[:500]},
        )

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise self._final_error(message, error)

    async def _handle_timeout_error(self, error: TimeoutException, attempt: int, step: str):
        """Handle timeout errors."""
        self.logger.warning(
            f"Request timeout (Attempt {attempt + 1}/{self.max_retries})",
            extra={"step": step},
        )

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        else:
            raise APITimeoutError(f"{step} timed out after {self.max_retries} attempts", original_error=error)

    async def _handle_generic_error(self, error: Exception, attempt: int, step: str):
        """Handle everything else, including protocol errors raised by the step."""
        self.logger.warning(
            f"Request failed (Attempt {attempt + 1}/{self.max_retries})",
            extra={"step": step, "error": str(error)},
        )

        if attempt < self.max_retries - 1:
            await self._wait_before_retry(attempt)
        elif isinstance(error, AppError):
            raise error
        elif isinstance(error, httpx.RequestError):
            raise self._final_error("Network error: No response received", error)
        else:
            raise self._final_error(str(error), error)

    def _final_error(self, message: str, error: Exception) -> APIClientError:
        """Exception raised once a step has exhausted its attempts."""
        return APIClientError(message, original_error=error)

    async def _wait_before_retry(self, attempt: int):
        """Linear backoff wait."""
        await self._sleep(self.retry_delay * (attempt + 1))
