"""
Retry utilities for SMTP delivery.

Provides exponential backoff for transient mail server failures: dropped
connections, timeouts and 4xx (temporary) SMTP replies. Permanent 5xx
replies and authentication failures are raised immediately.

Usage:
    from invoice_roi.utils.retry import retry_with_backoff, RetryConfig

    @retry_with_backoff(max_retries=2)
    def deliver():
        ...
"""

import dataclasses
import functools
import logging
import random
import smtplib
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 2
    base_delay: float = 1.0  # seconds
    max_delay: float = 10.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: (
            smtplib.SMTPServerDisconnected,
            smtplib.SMTPConnectError,
            ConnectionError,
            TimeoutError,
        )
    )


DEFAULT_RETRY_CONFIG = RetryConfig()


def calculate_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay for exponential backoff.

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = min(
        config.base_delay * (config.exponential_base ** attempt),
        config.max_delay,
    )

    if config.jitter:
        # Up to 25% random jitter
        delay = delay * (1 + random.uniform(0, 0.25))

    return delay


def should_retry_exception(exc: Exception, config: RetryConfig) -> bool:
    """Check if exception is retryable."""
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return False

    # 4xx replies are transient per RFC 5321
    if isinstance(exc, smtplib.SMTPResponseException) and not isinstance(
        exc, smtplib.SMTPConnectError
    ):
        return 400 <= exc.smtp_code < 500

    return isinstance(exc, config.retryable_exceptions)


def retry_with_backoff(
    func: Optional[Callable[..., T]] = None,
    *,
    config: Optional[RetryConfig] = None,
    max_retries: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[..., T]:
    """
    Decorator for retrying with exponential backoff.

    Usable bare (@retry_with_backoff) or with options
    (@retry_with_backoff(max_retries=3)).

    Args:
        func: Function to retry
        config: Full retry configuration
        max_retries: Override for max retries
        sleep: Sleep function, replaceable in tests
    """
    config = config or DEFAULT_RETRY_CONFIG
    if max_retries is not None:
        config = dataclasses.replace(config, max_retries=max_retries)

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(config.max_retries + 1):
                try:
                    return fn(*args, **kwargs)
                except Exception as exc:
                    if not should_retry_exception(exc, config):
                        logger.debug(f"Non-retryable exception: {type(exc).__name__}")
                        raise

                    if attempt >= config.max_retries:
                        logger.error(
                            f"All {config.max_retries} retries failed for {fn.__name__}"
                        )
                        raise

                    delay = calculate_delay(attempt, config)
                    logger.warning(
                        f"Retry {attempt + 1}/{config.max_retries} for {fn.__name__} "
                        f"after {delay:.1f}s (error: {exc})"
                    )
                    sleep(delay)

            raise RuntimeError("Retry logic error")

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
