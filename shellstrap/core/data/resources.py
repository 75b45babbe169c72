"""
The fixed table of plugins, themes and tools kept in sync.

Entries are declared against a root ("plugins", "themes" or "home")
and resolved into concrete paths by ``resolve_resources`` once the
settings are known. Order here is the order they are synced in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, NamedTuple

from shellstrap.core.config.loader import ConfigError
from shellstrap.core.models.resource import ManagedResource, ResourceKind
from shellstrap.core.models.settings import Settings

Root = Literal["plugins", "themes", "home"]

_FZF_INSTALL = ("{path}/install", "--all", "--key-bindings", "--completion", "--no-update-rc")


class ResourceEntry(NamedTuple):
    name: str
    remote_url: str
    root: Root
    subpath: str
    kind: ResourceKind = ResourceKind.PLUGIN
    shallow: bool = True
    on_clone: tuple[tuple[str, ...], ...] = ()
    on_update: tuple[tuple[str, ...], ...] = ()


RESOURCE_TABLE: tuple[ResourceEntry, ...] = (
    ResourceEntry(
        "zsh-autosuggestions",
        "https://github.com/zsh-users/zsh-autosuggestions",
        "plugins", "zsh-autosuggestions",
    ),
    ResourceEntry(
        "zsh-syntax-highlighting",
        "https://github.com/zsh-users/zsh-syntax-highlighting.git",
        "plugins", "zsh-syntax-highlighting",
    ),
    ResourceEntry(
        "zsh-completions",
        "https://github.com/zsh-users/zsh-completions",
        "plugins", "zsh-completions",
        shallow=False,
    ),
    ResourceEntry(
        "zsh-history-substring-search",
        "https://github.com/zsh-users/zsh-history-substring-search",
        "plugins", "zsh-history-substring-search",
        shallow=False,
    ),
    ResourceEntry(
        "fzf",
        "https://github.com/junegunn/fzf.git",
        "home", ".fzf",
        kind=ResourceKind.TOOL,
        on_clone=(_FZF_INSTALL,),
        on_update=(_FZF_INSTALL,),
    ),
    ResourceEntry(
        "fzf-tab",
        "https://github.com/Aloxaf/fzf-tab",
        "plugins", "fzf-tab",
    ),
    ResourceEntry(
        "k",
        "https://github.com/supercrabtree/k",
        "plugins", "k",
    ),
    ResourceEntry(
        "marker",
        "https://github.com/pindexis/marker",
        "home", ".marker",
        kind=ResourceKind.TOOL,
        on_clone=(("{path}/install.py", "{path}"),),
    ),
    ResourceEntry(
        "zsh-z",
        "https://github.com/agkozak/zsh-z",
        "plugins", "zsh-z",
    ),
    ResourceEntry(
        "powerlevel10k",
        "https://github.com/romkatv/powerlevel10k.git",
        "themes", "powerlevel10k",
        kind=ResourceKind.THEME,
    ),
    ResourceEntry(
        "spaceship-prompt",
        "https://github.com/spaceship-prompt/spaceship-prompt.git",
        "themes", "spaceship-prompt",
        kind=ResourceKind.THEME,
    ),
)


def _root_dir(root: Root, settings: Settings) -> Path:
    if root == "plugins":
        return settings.plugins_dir
    if root == "themes":
        return settings.themes_dir
    return settings.home


def resolve_resources(
    settings: Settings,
    table: tuple[ResourceEntry, ...] = RESOURCE_TABLE,
) -> list[ManagedResource]:
    """Turn the static table into resources with absolute paths.

    Raises:
        ConfigError: Two entries resolve to the same local path.
    """
    resources: list[ManagedResource] = []
    seen: dict[Path, str] = {}

    for entry in table:
        local_path = _root_dir(entry.root, settings) / entry.subpath
        if local_path in seen:
            raise ConfigError(
                f"Resources '{seen[local_path]}' and '{entry.name}' "
                f"both resolve to {local_path}"
            )
        seen[local_path] = entry.name
        resources.append(
            ManagedResource(
                name=entry.name,
                remote_url=entry.remote_url,
                local_path=local_path,
                kind=entry.kind,
                shallow=entry.shallow,
                on_clone=entry.on_clone,
                on_update=entry.on_update,
            )
        )

    return resources
