"""Shared test fixtures for ramlmock.

Provides a directory of ping specs, an isolated working directory, and a
reporter double that records diagnostics instead of printing them.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ramlmock.output import OutputManager, reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at creation
    time; a manager created under CliRunner would otherwise keep writing to a
    closed stream.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Reporters
# ---------------------------------------------------------------------------


@pytest.fixture
def reporter() -> MagicMock:
    """A reporter double that records every diagnostic call."""
    return MagicMock(spec=OutputManager)


# ---------------------------------------------------------------------------
# Fixture files and environment
# ---------------------------------------------------------------------------


@pytest.fixture
def ping_dir(tmp_path: Path) -> Path:
    """A directory holding only the two ping specs (plus a non-RAML file)."""
    directory = tmp_path / "ping"
    directory.mkdir()
    for name in ("ping-a.raml", "ping-b.raml"):
        (directory / name).write_text((FIXTURES_DIR / name).read_text())
    (directory / "README.md").write_text("not a spec")
    return directory


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate config: XDG data dir, RAMLMOCK_* variables, and the cwd."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["RAMLMOCK_PATH", "RAMLMOCK_FILES", "RAMLMOCK_USE_API_VERSION"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
