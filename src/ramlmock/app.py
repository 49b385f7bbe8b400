"""Typer application and CLI entry point for ramlmock.

Commands:

* ``ramlmock bundles`` -- list every ``(uri, method)`` bundle with its
  documented status codes and default code.
* ``ramlmock mock`` -- print the synthesized mock body (or the stored
  example) of one bundle.

Both commands take RAML files, URLs or glob patterns as arguments, or a
``--path`` directory; with neither, sources come from ``RAMLMOCK_*``
environment variables or ``./ramlmock.json`` (see
:func:`~ramlmock.config.resolve_options`).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under the
data directory.
"""

from __future__ import annotations

import asyncio
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, NoReturn, Optional

import typer

from ramlmock import __version__
from ramlmock.exceptions import NotFoundError, RamlMockError
from ramlmock.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="ramlmock",
    help="Turn RAML specifications into mock response bundles.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"ramlmock {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback: install the global output manager from the CLI flags."""
    from ramlmock.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))


# ------------------------------------------------------------------ #
# Shared options
# ------------------------------------------------------------------ #


def _sources_argument() -> Any:
    return typer.Argument(None, help="RAML files, URLs, or glob patterns.", show_default=False)


def _path_option() -> Any:
    return typer.Option(None, "--path", help="Directory whose *.raml files are collected.")


def _api_version_option() -> Any:
    return typer.Option(
        None,
        "--use-api-version/--no-use-api-version",
        help="Prefix every uri with the RAML document's declared version.",
        show_default=False,
    )


def _collect(
    sources: Optional[list[str]],
    path: Optional[str],
    use_api_version: Optional[bool],
) -> list[Any]:
    """Resolve options and run the collection, exiting on ramlmock errors."""
    from ramlmock.api import agenerate
    from ramlmock.config import resolve_options

    try:
        options = resolve_options(
            cli_path=path,
            cli_files=sources or None,
            cli_use_api_version=use_api_version,
        )
        return asyncio.run(agenerate(options))
    except RamlMockError as exc:
        _fail(exc)


def _fail(exc: RamlMockError) -> NoReturn:
    from ramlmock.output import error

    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("bundles")
def bundles_command(
    sources: Optional[list[str]] = _sources_argument(),
    path: Optional[str] = _path_option(),
    use_api_version: Optional[bool] = _api_version_option(),
) -> None:
    """List every mock bundle.

    Example::

        ramlmock bundles api/*.raml
        ramlmock --json bundles --path api/ --use-api-version
    """
    from ramlmock.output import print_table

    bundles = _collect(sources, path, use_api_version)

    rows: list[list[str]] = []
    for bundle in sorted(bundles, key=lambda b: (b.uri, b.method.lower())):
        rows.append([
            bundle.method.upper(),
            bundle.uri,
            ", ".join(str(code) for code in bundle.codes) or "-",
            str(bundle.default_code) if bundle.default_code is not None else "-",
        ])

    print_table(
        ["Method", "URI", "Codes", "Default"], rows, title=f"Mock bundles ({len(rows)})"
    )


@app.command("mock")
def mock_command(
    sources: Optional[list[str]] = _sources_argument(),
    uri: str = typer.Option(..., "--uri", "-u", help="Bundle uri, e.g. /users/:id."),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    code: Optional[int] = typer.Option(
        None, "--code", "-c", help="Status code (defaults to the bundle's default code)."
    ),
    example: bool = typer.Option(
        False, "--example", help="Print the stored example instead of a synthesized mock."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible mocks."),
    path: Optional[str] = _path_option(),
    use_api_version: Optional[bool] = _api_version_option(),
) -> None:
    """Print the mock body of one bundle.

    Example::

        ramlmock mock api/users.raml --uri /users/:id
        ramlmock mock api/users.raml --uri /users -X POST --code 201 --example
    """
    from ramlmock.api import find_bundle
    from ramlmock.mocker import seed as seed_mocks
    from ramlmock.output import get_output

    bundles = _collect(sources, path, use_api_version)

    bundle = find_bundle(bundles, uri, method)
    if bundle is None:
        _fail(NotFoundError(f"No bundle for {method.upper()} {uri}"))

    if code is None:
        code = bundle.default_code
        if code is None:
            _fail(NotFoundError(
                f"{method.upper()} {uri} has no 2xx response; pass --code "
                f"(documented: {', '.join(str(c) for c in bundle.codes) or 'none'})"
            ))
    if code not in bundle.responses_by_code:
        _fail(NotFoundError(f"{method.upper()} {uri} does not document status {code}"))

    if seed is not None:
        seed_mocks(seed)

    try:
        value = bundle.example_for(code) if example else bundle.mock_for(code)
    except RamlMockError as exc:
        _fail(exc)
    get_output().format_value(value)


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from ramlmock.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(exc)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``ramlmock`` console script.

    :class:`~ramlmock.exceptions.RamlMockError` instances cause a clean exit
    with the error's ``exit_code``. All other exceptions produce a crash log
    and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from ramlmock.output import error

        if isinstance(exc, RamlMockError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
