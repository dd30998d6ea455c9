"""Exception hierarchy for urispec.

All exceptions inherit from :class:`UrispecError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`urispec.exit_codes`.
The top-level error handler in :func:`urispec.app.main` catches
``UrispecError`` and exits with the appropriate code.

Errors raised while *parsing* a template are fatal to that
:meth:`~urispec.template.Template.create` call. Errors raised while
*expanding* abort only that :meth:`~urispec.template.Template.expand` call;
the template stays valid for the next set of variables.

Subclass hierarchy::

    UrispecError (exit 1)
    +-- InvalidUsageError     (exit 2)
    +-- TemplateSyntaxError   (exit 3, also ValueError)
    +-- RangeError            (exit 4, also ValueError)
    +-- ExpanderLookupError   (exit 5, also LookupError)
    +-- ExpansionError        (exit 6)
    +-- ConfigError           (exit 1)
"""

from urispec.exit_codes import (
    EXIT_EXPANDER_LOOKUP,
    EXIT_EXPANSION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_RANGE_ERROR,
    EXIT_TEMPLATE_SYNTAX,
)


class UrispecError(Exception):
    """Base exception for all urispec errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`urispec.exit_codes`. The CLI entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(UrispecError):
    """Raised for invalid CLI arguments (e.g. a ``-v`` option without ``=``)."""

    exit_code = EXIT_INVALID_USAGE


class TemplateSyntaxError(UrispecError, ValueError):
    """Raised when a template, expression, or varspec is malformed.

    Covers unknown operators, illegal name characters, empty expressions,
    non-numeric prefix digits, and ``explode`` combined with a prefix.
    """

    exit_code = EXIT_TEMPLATE_SYNTAX


class RangeError(UrispecError, ValueError):
    """Raised for prefix limits outside ``[0, 10000]`` or applied to collections.

    The second case is only detectable at expansion time, once the shape of
    the value bound to the variable is known.
    """

    exit_code = EXIT_RANGE_ERROR


class ExpanderLookupError(UrispecError, LookupError):
    """Raised when a custom expander cannot be imported or instantiated."""

    exit_code = EXIT_EXPANDER_LOOKUP


class ExpansionError(UrispecError):
    """Raised for any other failure while rendering a resolved value."""

    exit_code = EXIT_EXPANSION_ERROR


class ConfigError(UrispecError):
    """Raised for configuration problems (invalid JSON, unreadable variables files)."""

    exit_code = EXIT_GENERIC_FAILURE
