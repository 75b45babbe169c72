"""
Shared test fixtures: a throwaway home, settings, and a registry of fakes.
"""

import logging
from pathlib import Path

import pytest

from shellstrap.adapters.base import ExecutionContext
from shellstrap.adapters.mock import MockAdapter
from shellstrap.adapters.registry import AdapterRegistry
from shellstrap.adapters.shell.filesystem import FilesystemAdapter
from shellstrap.core.engine.executor import ActionRunner, StageReport
from shellstrap.core.models.settings import Settings
from shellstrap.core.services.platform_detect import PlatformInputs

ARCH_RELEASE = 'NAME="Arch Linux"\nPRETTY_NAME="Arch Linux"\nID=arch\nBUILD_ID=rolling\n'


def fake_git(ctx: ExecutionContext) -> None:
    """Leave a working copy behind, like a real clone would."""
    if ctx.params.get("operation") == "clone":
        dest = Path(ctx.params["dest"])
        dest.mkdir(parents=True, exist_ok=True)
        (dest / ".git").mkdir(exist_ok=True)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo any setup_logging call made by a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def make_settings(home: Path, tmp_path: Path):
    """Factory for Settings rooted at the temp home."""

    def _make(**overrides) -> Settings:
        values = {
            "home": home,
            "user": "tester",
            "zsh_dir": home / ".oh-my-zsh",
            "shim_path": tmp_path / "bin" / "pacapt",
            "ostype": "linux-gnu",
        }
        values.update(overrides)
        values.setdefault("zsh_custom", Path(values["zsh_dir"]) / "custom")
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def registry() -> AdapterRegistry:
    """Every effectful adapter faked; filesystem is real (it only touches tmp)."""
    return AdapterRegistry([
        MockAdapter("shell"),
        MockAdapter("git", side_effect=fake_git),
        MockAdapter("download", default_output="/tmp/fake-download"),
        MockAdapter("pacapt"),
        MockAdapter("brew"),
        MockAdapter("pip"),
        FilesystemAdapter(),
    ])


@pytest.fixture
def make_runner(registry: AdapterRegistry):
    """Factory for an ActionRunner bound to a fresh StageReport."""

    def _make(name: str = "test", **kwargs) -> ActionRunner:
        return ActionRunner(registry, StageReport(name=name), **kwargs)

    return _make


@pytest.fixture
def arch_inputs() -> PlatformInputs:
    return PlatformInputs(ostype="linux-gnu", release_text=ARCH_RELEASE, kernel_name="Linux")
