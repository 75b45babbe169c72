"""
Settings — the one immutable configuration object for a run.

Assembled once by ``core.config.loader.load_settings`` from defaults,
an optional YAML file, the environment and CLI flags, then passed
explicitly to every stage. Nothing downstream reads ``os.environ``
for configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


DEFAULT_REPO = "ohmyzsh/ohmyzsh"
DEFAULT_BRANCH = "master"
DEFAULT_RELEASE_GLOB = "/etc/*release"
DEFAULT_SHIM_PATH = Path("/usr/local/bin/pacapt")


class Settings(BaseModel):
    """Resolved configuration for one provisioning run."""

    model_config = ConfigDict(frozen=True)

    home: Path
    user: str

    # Framework checkout
    zsh_dir: Path
    zsh_custom: Path
    repo: str = DEFAULT_REPO
    remote: str = f"https://github.com/{DEFAULT_REPO}.git"
    branch: str = DEFAULT_BRANCH

    # Behaviour switches
    chsh: bool = True
    runzsh: bool = True
    keep_zshrc: bool = False
    with_extras: bool = False
    keep_going: bool = False
    dry_run: bool = False

    # Host probing
    ostype: str | None = None
    release_glob: str = DEFAULT_RELEASE_GLOB
    shim_path: Path = DEFAULT_SHIM_PATH

    # Terminal
    force_hyperlink: str | None = None

    @property
    def zshrc(self) -> Path:
        return self.home / ".zshrc"

    @property
    def plugins_dir(self) -> Path:
        return self.zsh_custom / "plugins"

    @property
    def themes_dir(self) -> Path:
        return self.zsh_custom / "themes"

    @property
    def unattended(self) -> bool:
        """Neither the login shell nor an interactive zsh will be touched."""
        return not self.chsh and not self.runzsh
