"""
Central error handling for the funding run.
Turns fatal errors into an operator-facing log line and a process exit code.
"""

import traceback

from gas_funder.core.exceptions.base import GasFunderError
from gas_funder.core.logger.logger import get_logger
from gas_funder.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class GlobalErrorHandler:
    """Maps exceptions escaping the run to exit codes"""

    @staticmethod
    def funding_error_handler(exc: GasFunderError) -> int:
        """Handle known GasFunderError exceptions"""
        logger.error(
            f"{exc.code}: {exc.message}",
            extra={
                "error_code": exc.code,
                "details": exc.details,
            }
        )
        return EXIT_FAILURE

    @staticmethod
    def interrupt_handler(exc: KeyboardInterrupt) -> int:
        logger.warning("Interrupted by operator, nothing was sent")
        return EXIT_INTERRUPTED

    @staticmethod
    def general_exception_handler(exc: Exception) -> int:
        """Handle unexpected exceptions"""
        extra = {
            "error_type": type(exc).__name__,
            "error_message": str(exc),
        }
        if settings.DEBUG:
            extra["traceback"] = traceback.format_exc()

        logger.error(f"Unexpected error: {type(exc).__name__}: {exc}", extra=extra)
        return EXIT_FAILURE


def handle_error(exc: BaseException) -> int:
    """Log a fatal error and return the exit code for it."""
    if isinstance(exc, GasFunderError):
        return GlobalErrorHandler.funding_error_handler(exc)
    if isinstance(exc, KeyboardInterrupt):
        return GlobalErrorHandler.interrupt_handler(exc)
    if isinstance(exc, Exception):
        return GlobalErrorHandler.general_exception_handler(exc)
    raise exc
