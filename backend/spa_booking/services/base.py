# backend/spa_booking/services/base.py
"""
Base Service Pattern for the spa booking API

Provides common functionality for all service classes including:
- Transaction management (single unit of work, bounded retry)
- Logging
- Error handling
- Performance monitoring
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Iterator, TypeVar, cast

from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    DomainException,
    RepositoryException,
    ServiceException,
    StoreUnavailableException,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SLOW_OPERATION_SECONDS = 1.0


def _is_transient(exc: BaseException) -> bool:
    """Lock timeouts, deadlocks and serialization failures are worth retrying."""
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    cause = exc.__cause__
    return cause is not None and cause is not exc and _is_transient(cause)


class BaseService:
    """
    Base class for all service layer components.

    Provides common patterns for:
    - Database session management
    - Logging
    - Transaction handling
    - Performance monitoring
    """

    def __init__(self, db: Session):
        """
        Initialize base service.

        Args:
            db: Database session
        """
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)
        self._metrics: Dict[str, Dict[str, Any]] = {}

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                # Do multiple operations
                self.db.add(entity)
                # Note: commit is handled automatically
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except DomainException:
            self.db.rollback()
            raise
        except OperationalError:
            self.logger.warning("Transaction hit a transient store error, rolling back")
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}") from e
        except Exception as e:
            self.logger.error(f"Unexpected error in transaction: {str(e)}")
            self.db.rollback()
            raise

    def run_in_transaction(self, work: Callable[[Session], T], *, operation: str) -> T:
        """
        Run ``work`` as one atomic read-modify-write.

        ``work`` must re-read whatever it mutates (the whole callable is
        replayed on retry). Domain errors abort immediately; transient store
        errors are retried up to ``booking_txn_max_attempts`` times before
        surfacing as ``StoreUnavailableException``.
        """
        attempts = max(1, settings.booking_txn_max_attempts)
        last_error: BaseException | None = None

        for attempt in range(1, attempts + 1):
            try:
                with self.transaction() as session:
                    return work(session)
            except RepositoryException as exc:
                if not _is_transient(exc):
                    raise ServiceException(
                        f"{operation} failed: {exc}", code="STORE_ERROR"
                    ) from exc
                last_error = exc
            except OperationalError as exc:
                last_error = exc

            self.logger.warning(
                "%s: transient store error on attempt %d/%d: %s",
                operation,
                attempt,
                attempts,
                last_error,
            )
            if attempt < attempts and settings.booking_txn_retry_backoff_seconds:
                time.sleep(settings.booking_txn_retry_backoff_seconds * attempt)

        raise StoreUnavailableException(
            f"{operation} aborted after {attempts} attempts",
            code="TRANSACTION_ABORTED",
            details={"operation": operation, "attempts": attempts},
        ) from last_error

    @staticmethod
    def measure_operation(operation_name: str) -> Callable:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, data):
                # Method implementation

        Args:
            operation_name: Name of the operation for metrics

        Returns:
            Decorator function
        """

        F = TypeVar("F", bound=Callable[..., Any])

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                start_time = time.time()
                success = False

                try:
                    result = func(self, *args, **kwargs)
                    success = True
                    return result
                finally:
                    elapsed = time.time() - start_time

                    if hasattr(self, "_record_metric"):
                        self._record_metric(operation_name, elapsed, success)

                    # Only log if it's actually slow
                    if elapsed > SLOW_OPERATION_SECONDS and hasattr(self, "logger"):
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )

            return cast(F, wrapper)

        return decorator

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        """Record metrics for an operation."""
        if not hasattr(self, "_metrics"):
            self._metrics = {}
        stats = self._metrics.setdefault(
            operation, {"count": 0, "total_time": 0.0, "success_count": 0, "failure_count": 0}
        )
        stats["count"] += 1
        stats["total_time"] += elapsed
        if success:
            stats["success_count"] += 1
        else:
            stats["failure_count"] += 1

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Per-operation call counts and average latency for this service instance."""
        return {
            name: {**stats, "avg_time": stats["total_time"] / stats["count"]}
            for name, stats in self._metrics.items()
            if stats["count"]
        }
