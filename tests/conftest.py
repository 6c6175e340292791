"""Shared test fixtures for grimoire.

Provides a controllable clock for deterministic expiry, canned catalog
payloads, an isolated config environment, output-state management, and a
CLI runner. These fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from grimoire.cache import ResponseCache
from grimoire.models import CatalogConfig, FreshnessConfig, GlobalConfig
from grimoire.output import OutputFormat, OutputManager, reset_output, set_output


ORIGIN = "https://www.dnd5eapi.co"
BASE = f"{ORIGIN}/api"


class FakeClock:
    """Manually advanced clock; call it to read the current time."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once CliRunner restores the streams.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    """An empty cache driven by the fake clock, 300 s default window."""
    return ResponseCache(clock=clock, default_ttl=300)


# ---------------------------------------------------------------------------
# Catalog payloads
# ---------------------------------------------------------------------------


@pytest.fixture
def spell_list_payload() -> dict[str, Any]:
    return {
        "count": 2,
        "results": [
            {"index": "fireball", "name": "Fireball", "level": 3, "url": "/api/spells/fireball"},
            {"index": "fly", "name": "Fly", "level": 3, "url": "/api/spells/fly"},
        ],
    }


@pytest.fixture
def fireball_payload() -> dict[str, Any]:
    return {
        "index": "fireball",
        "name": "Fireball",
        "level": 3,
        "school": {"index": "evocation", "name": "Evocation", "url": "/api/magic-schools/evocation"},
        "casting_time": "1 action",
        "range": "150 feet",
        "duration": "Instantaneous",
        "components": ["V", "S", "M"],
        "desc": ["A bright streak flashes from your pointing finger."],
        "higher_level": ["The damage increases by 1d6 for each slot level above 3rd."],
        "classes": [{"index": "wizard", "name": "Wizard", "url": "/api/classes/wizard"}],
        "ritual": False,
        "url": "/api/spells/fireball",
    }


@pytest.fixture
def classes_payload() -> dict[str, Any]:
    return {
        "count": 2,
        "results": [
            {"index": "cleric", "name": "Cleric", "url": "/api/classes/cleric"},
            {"index": "wizard", "name": "Wizard", "url": "/api/classes/wizard"},
        ],
    }


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def generic_catalog() -> CatalogConfig:
    """Generic layout: ``{base}/items``, ``{base}/categories/...``, ``?filter=``."""
    return CatalogConfig(origin=ORIGIN, api_prefix="/api")


@pytest.fixture
def freshness() -> FreshnessConfig:
    return FreshnessConfig()


@pytest.fixture
def global_config() -> GlobalConfig:
    return GlobalConfig()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of tmp_path,
    clears GRIMOIRE_* variables and changes the working directory to
    tmp_path so no project config leaks in.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("GRIMOIRE_ORIGIN", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
