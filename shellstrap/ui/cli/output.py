"""
Terminal output helpers — banners, links and colour.

Everything returns strings styled with ``click.style``; callers print
them with ``click.echo``, which strips SGR codes when stdout isn't a
terminal. OSC 8 hyperlinks are not stripped by click, so ``fmt_link``
checks ``supports_hyperlinks`` itself.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from typing import IO

import click

# Stage name → section banner title
STAGE_BANNERS: dict[str, str] = {
    "packages": "DEPENDENCY CHECK",
    "config": "OHMYZSH INSTALL",
    "sync": "INSTALL PLUGINS",
    "extras": "EXTRAS",
}

_BANNER_RULE = "-" * 58
_BANNER_WIDTH = 58

_HYPERLINK_PROGRAMS = {"Hyper", "iTerm.app", "terminology", "WezTerm"}
_TRUECOLOR_TERMS = {
    "iterm",
    "tmux-truecolor",
    "linux-truecolor",
    "xterm-truecolor",
    "screen-truecolor",
}

RAINBOW_TRUECOLOR: tuple[tuple[int, int, int], ...] = (
    (255, 0, 0),
    (255, 97, 0),
    (247, 255, 0),
    (0, 255, 30),
    (77, 0, 255),
    (168, 0, 255),
    (245, 0, 172),
)
RAINBOW_256: tuple[int, ...] = (196, 202, 226, 82, 21, 93, 163)

# Seven columns per row, one rainbow colour each.
_LOGO: tuple[tuple[str, ...], ...] = (
    ("         ", "__      ", "           ", "        ", "       ", "     ", "__   "),
    ("  ____  ", "/ /_    ", " ____ ___  ", "__  __  ", " ____  ", "_____", "/ /_  "),
    (" / __ \\", "/ __ \\  ", " / __ `__ \\", "/ / / / ", " /_  / ", "/ ___/", " __ \\ "),
    ("/ /_/ /", " / / / ", " / / / / / /", " /_/ / ", "   / /_", "(__  )", " / / / "),
    ("\\____/", "_/ /_/ ", " /_/ /_/ /_/", "\\__, / ", "   /___/", "____/", "_/ /_/  "),
    ("    ", "        ", "           ", " /____/ ", "       ", "     ", "          "),
)


# ── Terminal capabilities ───────────────────────────────────────


def is_tty(stream: IO | None = None) -> bool:
    """Whether ``stream`` (default: stdout) is attached to a terminal."""
    stream = stream if stream is not None else sys.stdout
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def supports_hyperlinks(env: Mapping[str, str] | None = None, tty: bool | None = None) -> bool:
    """OSC 8 hyperlink support, after zkat/supports-hyperlinks.

    ``FORCE_HYPERLINK`` overrides everything: any non-empty value other
    than ``0`` enables links.
    """
    env = os.environ if env is None else env
    tty = is_tty() if tty is None else tty

    forced = env.get("FORCE_HYPERLINK")
    if forced:
        return forced != "0"

    if not tty:
        return False
    if env.get("DOMTERM"):
        return True

    vte = env.get("VTE_VERSION")
    if vte:
        # VTE 0.50 and later
        return vte.isdigit() and int(vte) >= 5000

    if env.get("TERM_PROGRAM") in _HYPERLINK_PROGRAMS:
        return True
    if env.get("TERM") == "xterm-kitty":
        return True
    return bool(env.get("WT_SESSION"))


def supports_truecolor(env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    if env.get("COLORTERM") in ("truecolor", "24bit"):
        return True
    return env.get("TERM") in _TRUECOLOR_TERMS


def rainbow(env: Mapping[str, str] | None = None) -> tuple:
    """The seven logo colours, as ``click.style`` fg values."""
    return RAINBOW_TRUECOLOR if supports_truecolor(env) else RAINBOW_256


# ── Formatting ──────────────────────────────────────────────────


def fmt_underline(text: str, tty: bool | None = None) -> str:
    tty = is_tty() if tty is None else tty
    return click.style(text, underline=True) if tty else text


def fmt_code(text: str, tty: bool | None = None) -> str:
    tty = is_tty() if tty is None else tty
    return f"`{click.style(text, dim=True)}`" if tty else f"`{text}`"


def fmt_link(
    text: str,
    url: str,
    fallback: str = "url",
    env: Mapping[str, str] | None = None,
    tty: bool | None = None,
) -> str:
    """A clickable link, or ``text`` / underlined ``url`` as fallback."""
    if supports_hyperlinks(env, tty):
        return f"\033]8;;{url}\033\\{text}\033]8;;\033\\"
    if fallback == "text":
        return text
    return fmt_underline(url, tty)


def fmt_error(text: str) -> str:
    return click.style(f"Error: {text}", fg="red", bold=True)


# ── Banners ─────────────────────────────────────────────────────


def section_banner(title: str) -> str:
    return "\n".join((_BANNER_RULE, title.center(_BANNER_WIDTH).rstrip(), _BANNER_RULE))


def print_section(title: str) -> None:
    click.echo(section_banner(title))


def success_banner(
    zshrc: str,
    env: Mapping[str, str] | None = None,
    tty: bool | None = None,
) -> str:
    """The rainbow logo plus the pointer to the installed ``.zshrc``."""
    colours = rainbow(env)
    rows = [
        "".join(click.style(part, fg=colour) for part, colour in zip(row, colours))
        for row in _LOGO
    ]
    rows[-1] += click.style("....is now installed!", fg="green")

    link = fmt_code(fmt_link(".zshrc", f"file://{zshrc}", fallback="text", env=env, tty=tty), tty)
    scream = click.style("Oh My Zsh!", fg="yellow", bold=True)
    rows += [
        "",
        "",
        f"Before you scream {scream} look over the {link} file to select plugins, themes, and options.",
        "",
    ]
    return "\n".join(rows)
