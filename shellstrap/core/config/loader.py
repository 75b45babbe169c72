"""
Settings loader — builds the immutable Settings for a run.

Sources, lowest precedence first:

    defaults  <  YAML config file  <  environment  <  CLI flags

The YAML file is optional. It is looked up at ``--config``, then
``$SHELLSTRAP_CONFIG``, then ``~/.config/shellstrap/config.yml``.
Environment variable names follow the Oh My Zsh installer (ZSH, REPO,
REMOTE, BRANCH, CHSH, RUNZSH, KEEP_ZSHRC) so existing habits carry over.
"""

from __future__ import annotations

import getpass
import logging
import os
import pwd
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from shellstrap.core.models.settings import DEFAULT_REPO, Settings

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SHELLSTRAP_CONFIG"
DEFAULT_CONFIG_RELPATH = Path(".config") / "shellstrap" / "config.yml"

# Keys a config file may set. Everything else is rejected.
_FILE_KEYS = frozenset({
    "zsh_dir",
    "zsh_custom",
    "repo",
    "remote",
    "branch",
    "chsh",
    "runzsh",
    "keep_zshrc",
    "with_extras",
    "keep_going",
    "release_glob",
    "shim_path",
})

_PATH_KEYS = ("zsh_dir", "zsh_custom", "shim_path")

_TRUTHY = {"yes", "y", "true", "1", "on"}
_FALSY = {"no", "n", "false", "0", "off"}


class ConfigError(Exception):
    """Raised when settings or the config file are invalid."""


def parse_yes_no(name: str, value: str) -> bool:
    """Interpret a yes/no style environment value.

    Raises:
        ConfigError: The value is neither yes-like nor no-like.
    """
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"{name} must be 'yes' or 'no', got {value!r}")


def _resolve_user(env: Mapping[str, str]) -> str:
    # USER is set by login(1), which containers often skip.
    return env.get("USER") or getpass.getuser()


def _resolve_home(env: Mapping[str, str], user: str) -> Path:
    home = env.get("HOME")
    if home:
        return Path(home)
    try:
        return Path(pwd.getpwnam(user).pw_dir)
    except KeyError:
        return Path(os.path.expanduser(f"~{user}"))


def find_config_file(
    home: Path,
    explicit: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Path | None:
    """Locate the YAML config file, if any.

    An explicit path (flag or env var) must exist; the default location
    is optional.

    Raises:
        ConfigError: An explicitly requested file does not exist.
    """
    env = os.environ if env is None else env
    requested = explicit or (Path(env[CONFIG_ENV_VAR]) if env.get(CONFIG_ENV_VAR) else None)
    if requested is not None:
        requested = requested.expanduser()
        if not requested.is_file():
            raise ConfigError(f"Config file not found: {requested}")
        return requested

    default = home / DEFAULT_CONFIG_RELPATH
    return default if default.is_file() else None


def load_config_file(path: Path) -> dict[str, Any]:
    """Read and shape-check a YAML config file.

    Raises:
        ConfigError: Unreadable file, invalid YAML, or unknown keys.
    """
    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    unknown = sorted(set(data) - _FILE_KEYS)
    if unknown:
        raise ConfigError(f"Unknown keys in {path}: {', '.join(unknown)}")

    for key in _PATH_KEYS:
        if key in data and data[key] is not None:
            data[key] = Path(str(data[key])).expanduser()

    return data


def _from_env(env: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}

    if env.get("ZSH"):
        values["zsh_dir"] = Path(env["ZSH"]).expanduser()
    if env.get("ZSH_CUSTOM"):
        values["zsh_custom"] = Path(env["ZSH_CUSTOM"]).expanduser()

    for var, key in (("REPO", "repo"), ("REMOTE", "remote"), ("BRANCH", "branch")):
        if env.get(var):
            values[key] = env[var]

    for var, key in (
        ("CHSH", "chsh"),
        ("RUNZSH", "runzsh"),
        ("KEEP_ZSHRC", "keep_zshrc"),
        ("SHELLSTRAP_EXTRAS", "with_extras"),
    ):
        if env.get(var):
            values[key] = parse_yes_no(var, env[var])

    if env.get("OSTYPE"):
        values["ostype"] = env["OSTYPE"]
    if "FORCE_HYPERLINK" in env:
        values["force_hyperlink"] = env["FORCE_HYPERLINK"]

    return values


def _from_flags(flags: Mapping[str, bool]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    if flags.get("skip_chsh"):
        values["chsh"] = False
    if flags.get("unattended"):
        values["chsh"] = False
        values["runzsh"] = False
    for key in ("keep_zshrc", "with_extras", "keep_going", "dry_run"):
        if flags.get(key):
            values[key] = True
    return values


def load_settings(
    flags: Mapping[str, bool] | None = None,
    env: Mapping[str, str] | None = None,
    config_path: Path | None = None,
) -> Settings:
    """Assemble the Settings for this run.

    Args:
        flags: CLI switches (skip_chsh, unattended, keep_zshrc,
            with_extras, keep_going, dry_run). Only ``True`` overrides.
        env: Environment mapping (default: ``os.environ``).
        config_path: Explicit YAML config file.

    Returns:
        Frozen Settings.

    Raises:
        ConfigError: Any source holds an invalid value.
    """
    env = os.environ if env is None else env
    user = _resolve_user(env)
    home = _resolve_home(env, user)

    values: dict[str, Any] = {"home": home, "user": user}

    file_path = find_config_file(home, config_path, env)
    if file_path is not None:
        values.update(load_config_file(file_path))

    values.update(_from_env(env))
    values.update(_from_flags(flags or {}))

    values.setdefault("zsh_dir", home / ".oh-my-zsh")
    values.setdefault("zsh_custom", Path(values["zsh_dir"]) / "custom")
    values.setdefault("remote", f"https://github.com/{values.get('repo', DEFAULT_REPO)}.git")

    try:
        settings = Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    logger.info(
        "Settings: home=%s zsh=%s chsh=%s runzsh=%s keep_zshrc=%s",
        settings.home, settings.zsh_dir, settings.chsh, settings.runzsh, settings.keep_zshrc,
    )
    return settings
