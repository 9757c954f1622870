"""
pytest configuration and fixtures.
"""

import io
import stat
from pathlib import Path
from types import SimpleNamespace

import pytest
from rich.console import Console

from snip import config as snip_config
from snip.config import Settings
from snip.core.storage import JsonSnippetStore
from snip.execution import engine


class RecordingSpawner:
    """Stands in for the interpreter launch and records what it was given."""

    def __init__(self, returncode=0, error=None):
        self.returncode = returncode
        self.error = error
        self.calls = []
        self.scripts = []

    def __call__(self, argv):
        self.calls.append(list(argv))
        script = Path(argv[-1])
        self.scripts.append({
            "path": script,
            "content": script.read_text(encoding="utf-8"),
            "mode": stat.S_IMODE(script.stat().st_mode),
        })
        if self.error is not None:
            raise self.error
        return SimpleNamespace(returncode=self.returncode)

    @property
    def called(self):
        return bool(self.calls)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep every test away from the real config, database and signal handlers."""
    monkeypatch.setenv("SNIP_CONFIG_FILE", str(tmp_path / "config" / "config.json"))
    monkeypatch.setenv("SNIP_DATA_DIR", str(tmp_path / "data"))
    for name in ("SNIP_DB_PATH", "SNIP_CONFIRM_RUN", "SNIP_LOG_FILE", "SNIP_LOG_LEVEL", "SNIP_DEFAULT_SHELL"):
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setattr(snip_config, "_settings", None)
    monkeypatch.setattr(engine, "install_signal_handlers", lambda: True)
    return tmp_path


@pytest.fixture
def store(tmp_path):
    """An empty JSON snippet store."""
    return JsonSnippetStore(tmp_path / "store" / "db.json")


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at temporary paths, without the run confirmation."""
    return Settings(data_dir=tmp_path / "data", default_shell="sh", confirm_run=False)


@pytest.fixture
def spawner():
    return RecordingSpawner()


@pytest.fixture
def quiet_console():
    """A console writing into a buffer."""
    return Console(file=io.StringIO(), width=120)
