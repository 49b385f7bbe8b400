"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ramlmock.exceptions.RamlMockError` subclass.
Shell wrappers and CI scripts can inspect the exit code to tell a bad
invocation from a broken RAML file without parsing stderr.

Example::

    $ ramlmock bundles api/broken.raml
    $ echo $?
    7   # EXIT_SPEC_LOAD_ERROR -- the RAML file could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required inputs."""

EXIT_NOT_FOUND = 4
"""The requested bundle (uri + method) or status code does not exist."""

EXIT_SPEC_LOAD_ERROR = 7
"""A RAML specification could not be loaded or parsed."""

EXIT_SCHEMA_MOCK_ERROR = 8
"""A response schema could not be turned into a mock value."""
