"""Error handling framework for tracksync.

Provides custom exception types and decorators for standardized error handling
across the library.

Site detection failures are not exceptions: the resolver returns a
``SiteExtractionFailure`` value so the orchestration cycle never aborts on them.
"""

import inspect
import logging
from functools import wraps

logger = logging.getLogger(__name__)


# Custom Exception Hierarchy
class TrackSyncError(Exception):
    """Base exception for all tracksync-specific errors."""

    pass


class RetrievalError(TrackSyncError):
    """Subtitle retrieval failed.

    Any retrieval error that escapes a batch aborts the whole batch and is
    shown to the user as a single message.
    """

    pass


class RetrievalHTTPError(RetrievalError):
    """A direct or segment fetch answered with a non-success status."""

    def __init__(self, status: int, reason: str = ""):
        self.status = status
        self.reason = reason
        super().__init__(f"Subtitle Retrieval failed with Status {status}/{reason}...")


class TransportFetchError(RetrievalError):
    """The fetch itself failed (network error, revoked object URL).

    For direct tracks this only skips the affected track.
    """

    pass


class LanguageUndeterminedError(RetrievalError):
    """An on-demand track was requested without a language."""

    def __init__(self, message: str = "Unable to determine language"):
        super().__init__(message)


class LazyResolutionError(RetrievalError):
    """The page layer could not resolve an on-demand track."""

    def __init__(self, message: str = "Failed to fetch subtitles for specified language"):
        super().__init__(message)


class SearchFailedError(TrackSyncError):
    """Remote subtitle search failed (no external id, or service error)."""

    pass


class ChannelError(TrackSyncError):
    """A cross-context request could not be delivered or answered."""

    pass


class ConfigurationError(TrackSyncError):
    """Configuration validation failed.

    Raised when a collaborator is missing or a setting is invalid.
    """

    pass


# Error Handling Decorator
def handle_errors(
    *,
    error_types: tuple[type[Exception], ...],
    default_message: str,
    log_level: str = "error",
    reraise: bool = True,
    wrap_as: type[TrackSyncError] | None = None,
):
    """Decorator for standardized error handling.

    Args:
        error_types: Tuple of exception types to catch
        default_message: Message to log when error occurs
        log_level: Logging level (error, warning, info, debug)
        reraise: Whether to re-raise the exception after logging
        wrap_as: Optionally wrap the caught exception in a TrackSyncError subclass

    Example:
        @handle_errors(
            error_types=(requests.RequestException,),
            default_message="AniList lookup failed",
            wrap_as=SearchFailedError,
        )
        def resolve_external_id(title):
            # ... operation ...
    """

    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except error_types as e:
                log_func = getattr(logger, log_level)
                log_func(
                    f"{default_message}: {e}",
                    exc_info=(log_level == "error"),
                )
                if wrap_as:
                    raise wrap_as(f"{default_message}: {e}") from e
                if reraise:
                    raise

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except error_types as e:
                log_func = getattr(logger, log_level)
                log_func(
                    f"{default_message}: {e}",
                    exc_info=(log_level == "error"),
                )
                if wrap_as:
                    raise wrap_as(f"{default_message}: {e}") from e
                if reraise:
                    raise

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


# Context Manager for Error Handling
class error_context:
    """Context manager for error handling in specific code blocks.

    Example:
        with error_context(
            error_types=(httpx.RequestError,),
            default_message="Subtitle fetch failed",
            wrap_as=TransportFetchError,
        ):
            # ... code that might raise errors ...
    """

    def __init__(
        self,
        *,
        error_types: tuple[type[Exception], ...],
        default_message: str,
        log_level: str = "error",
        wrap_as: type[TrackSyncError] | None = None,
    ):
        self.error_types = error_types
        self.default_message = default_message
        self.log_level = log_level
        self.wrap_as = wrap_as

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None and issubclass(exc_type, self.error_types):
            log_func = getattr(logger, self.log_level)
            log_func(
                f"{self.default_message}: {exc_val}",
                exc_info=(self.log_level == "error"),
            )
            if self.wrap_as:
                raise self.wrap_as(f"{self.default_message}: {exc_val}") from exc_val
            return False
        return False
