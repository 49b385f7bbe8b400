"""Exception hierarchy for ramlmock.

All exceptions inherit from :class:`RamlMockError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ramlmock.exit_codes`.
The CLI entry point in :func:`ramlmock.app.main` catches ``RamlMockError``
and exits with the appropriate code, while unexpected exceptions produce a
crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    RamlMockError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- SpecLoadError       (exit 7)
    +-- SchemaMockError     (exit 8)
    +-- ConfigError         (exit 1)
"""

from ramlmock.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SCHEMA_MOCK_ERROR,
    EXIT_SPEC_LOAD_ERROR,
)


class RamlMockError(Exception):
    """Base exception for all ramlmock errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`ramlmock.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RamlMockError):
    """Raised when the entry point is called without options or a callback."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(RamlMockError):
    """Raised when a requested uri/method pair or status code has no bundle."""

    exit_code = EXIT_NOT_FOUND


class SpecLoadError(RamlMockError):
    """Raised when a RAML file cannot be read, parsed, or normalized.

    A single ``SpecLoadError`` aborts a whole multi-file collection.

    Args:
        message: Description of the failure.
        source: The file path or URL that failed, when known.
    """

    exit_code = EXIT_SPEC_LOAD_ERROR

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class SchemaMockError(RamlMockError):
    """Raised when a JSON schema cannot be turned into a mock value."""

    exit_code = EXIT_SCHEMA_MOCK_ERROR


class ConfigError(RamlMockError):
    """Raised for configuration problems (invalid project file, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE
