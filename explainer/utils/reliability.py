"""
Reliability patterns for the explainer application.

Provides retry logic for outbound model calls and performance tracking.
"""

import inspect
import logging
import time
from functools import wraps
from typing import Callable

import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)


def with_retry(
    max_attempts: int = 3,
    backoff_max: float = 30.0,
    retry_exceptions: tuple = (Exception,),
    backoff_min: float = 0.5,
):
    """Decorator to add retry logic with exponential backoff."""

    def log_failure(func: Callable, e: Exception) -> None:
        logger.warning(
            "Retrying operation",
            function=func.__name__,
            error=str(e),
            error_type=type(e).__name__,
        )

    def decorator(func: Callable) -> Callable:
        policy = retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, min=backoff_min, max=backoff_max),
            retry=retry_if_exception_type(retry_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except retry_exceptions as e:
                    log_failure(func, e)
                    raise

            return policy(async_wrapper)

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except retry_exceptions as e:
                log_failure(func, e)
                raise

        return policy(wrapper)

    return decorator


def track_performance(operation_name: str):
    """
    Decorator to track performance metrics for operations.

    Args:
        operation_name: Name of the operation for logging
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "Performance tracking failed",
                    operation=operation_name,
                    duration_seconds=time.time() - start_time,
                    status="failed",
                    error=str(e),
                )
                raise

            logger.info(
                "Performance tracking completed",
                operation=operation_name,
                duration_seconds=time.time() - start_time,
                status="success",
            )
            return result

        return wrapper

    return decorator
