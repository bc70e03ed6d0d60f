"""Error handling service for fatal and non-fatal errors."""

import sys
import traceback
from typing import Optional

from trainer.services.logging_service import LoggingService


class ErrorHandler:
    """Handles application errors.

    Fatal errors are printed to the console and terminate the application.
    Non-fatal errors raised by collaborators (for example an annotation that
    failed to render) are reported through report_error() and logged; they
    never abort the operation that triggered them.
    """

    @staticmethod
    def handle_fatal_error(error: BaseException, context: Optional[str] = None) -> None:
        """Handle a fatal error by printing to console and terminating.

        Args:
            error: The exception that occurred.
            context: Optional context message describing where the error occurred.
        """
        print("=" * 80, file=sys.stderr)
        print("FATAL ERROR", file=sys.stderr)
        print("=" * 80, file=sys.stderr)

        if context:
            print(f"Context: {context}", file=sys.stderr)
            print("", file=sys.stderr)

        print(f"Error Type: {type(error).__name__}", file=sys.stderr)
        print(f"Error Message: {str(error)}", file=sys.stderr)
        print("", file=sys.stderr)

        print("Traceback:", file=sys.stderr)
        traceback.print_exception(type(error), error, error.__traceback__, file=sys.stderr)

        print("=" * 80, file=sys.stderr)
        print("Application will now terminate.", file=sys.stderr)
        print("=" * 80, file=sys.stderr)

        sys.exit(1)

    @staticmethod
    def report_error(error: BaseException, context: Optional[str] = None) -> None:
        """Report a non-fatal error to the log.

        Args:
            error: The exception that occurred.
            context: Optional context message describing where the error occurred.
        """
        message = f"{context}: {type(error).__name__}: {error}" if context else f"{type(error).__name__}: {error}"
        LoggingService.get_instance().error(message, exc_info=error)

    @staticmethod
    def setup_exception_handler() -> None:
        """Install a global exception handler for uncaught exceptions."""
        def exception_handler(exc_type, exc_value, exc_traceback):
            """Handle uncaught exceptions."""
            if exc_type == KeyboardInterrupt:
                # Don't print traceback for Ctrl+C
                print("\nApplication interrupted by user.", file=sys.stderr)
                sys.exit(130)  # Standard exit code for SIGINT

            error = exc_value if exc_value else exc_type()
            ErrorHandler.handle_fatal_error(error, "Uncaught exception")

        sys.excepthook = exception_handler
