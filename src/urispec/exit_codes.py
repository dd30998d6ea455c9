"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~urispec.exceptions.UrispecError` subclass.
Shell scripts wrapping ``urispec`` can inspect the exit code to determine
the failure class without parsing stderr.

Example::

    $ urispec expand '{var:99999}'
    $ echo $?
    4   # EXIT_RANGE_ERROR -- prefix limit outside [0, 10000]
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_TEMPLATE_SYNTAX = 3
"""The URI template could not be parsed."""

EXIT_RANGE_ERROR = 4
"""A prefix modifier was out of range or applied to a composite value."""

EXIT_EXPANDER_LOOKUP = 5
"""A custom expander could not be resolved or instantiated."""

EXIT_EXPANSION_ERROR = 6
"""A resolved value could not be rendered into a valid URI."""
