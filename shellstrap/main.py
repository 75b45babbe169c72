"""
shellstrap — CLI entrypoint.

Usage:
    shellstrap --help
    shellstrap --unattended
    python -m shellstrap.main --dry-run --json
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from shellstrap import __version__
from shellstrap.core.config.loader import ConfigError
from shellstrap.core.observability.logging_config import resolve_level, setup_logging

_STATUS_ICONS = {
    "ok": ("✅", "green"),
    "partial": ("⚠️ ", "yellow"),
    "failed": ("❌", "red"),
    "aborted": ("❌", "red"),
    "skipped": ("⏭️ ", "white"),
}


@click.command()
@click.version_option(version=__version__, prog_name="shellstrap")
@click.option("--skip-chsh", is_flag=True, help="Don't change the login shell (same as CHSH=no).")
@click.option("--unattended", is_flag=True, help="Don't change the shell or start zsh (CHSH=no RUNZSH=no).")
@click.option("--keep-zshrc", is_flag=True, help="Leave an existing ~/.zshrc alone (same as KEEP_ZSHRC=yes).")
@click.option("--with-extras", is_flag=True, help="Also install thefuck, zinit and prettyping.")
@click.option("--keep-going", is_flag=True, help="Record failed clones/pulls and carry on instead of aborting.")
@click.option("--dry-run", is_flag=True, help="Show what would run without changing anything.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the run report as JSON.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to a YAML config file (default: ~/.config/shellstrap/config.yml).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
def cli(
    skip_chsh: bool,
    unattended: bool,
    keep_zshrc: bool,
    with_extras: bool,
    keep_going: bool,
    dry_run: bool,
    as_json: bool,
    config_path: str | None,
    verbose: bool,
    quiet: bool,
    debug: bool,
) -> None:
    """Bootstrap zsh: packages, Oh My Zsh, plugins and themes."""
    from shellstrap.core.config.loader import load_settings
    from shellstrap.core.use_cases.provision import run_provision

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug, verbose, quiet, os.environ.get("SHELLSTRAP_LOG_LEVEL")),
        log_file=os.environ.get("SHELLSTRAP_LOG_FILE"),
        log_file_level=os.environ.get("SHELLSTRAP_LOG_FILE_LEVEL"),
    )

    flags = {
        "skip_chsh": skip_chsh,
        "unattended": unattended,
        "keep_zshrc": keep_zshrc,
        "with_extras": with_extras,
        "keep_going": keep_going,
        "dry_run": dry_run,
    }

    try:
        settings = load_settings(
            flags=flags,
            config_path=Path(config_path) if config_path else None,
        )
        on_stage = None if (as_json or quiet) else _stage_announcer(settings.chsh)
        result = run_provision(settings, on_stage=on_stage)
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e), "exit_code": 1}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    term_env = dict(os.environ)
    if settings.force_hyperlink is not None:
        term_env["FORCE_HYPERLINK"] = settings.force_hyperlink
    _print_summary(result, str(settings.zshrc), term_env, quiet)

    zsh = result.handoff_shell
    if zsh and not settings.dry_run:
        sys.stdout.flush()
        sys.stderr.flush()
        os.execv(zsh, [zsh])

    sys.exit(result.exit_code)


def _stage_announcer(chsh: bool):
    """Banner printer passed to ``run_provision`` as ``on_stage``."""
    from shellstrap.core.services.shell_config import SUDO_NOTICE, SWITCH_STAGE_NAME
    from shellstrap.ui.cli.output import STAGE_BANNERS, print_section

    def announce(stage: str) -> None:
        title = STAGE_BANNERS.get(stage)
        if title:
            print_section(title)
        elif stage == SWITCH_STAGE_NAME and chsh:
            click.echo(f"\n{SUDO_NOTICE}\n")

    return announce


def _print_summary(result, zshrc: str, term_env: dict[str, str], quiet: bool) -> None:
    from shellstrap.ui.cli.output import fmt_error, success_banner

    if not quiet:
        click.echo()
        if result.profile is not None:
            click.secho(f"   Platform: {result.profile.family.value}", fg="white", bold=True)
        for report in result.stages:
            icon, colour = _STATUS_ICONS.get(report.status, ("•", "white"))
            click.echo(f"   {icon} {report.name:<9}", nl=False)
            click.secho(f" {report.succeeded}/{report.total}", fg=colour, nl=False)
            if report.skipped_reason:
                click.echo(f"  ({report.skipped_reason})", nl=False)
            click.echo()
        if result.dry_run:
            click.secho("   [dry-run] nothing was changed", fg="cyan")
        click.echo()

    if result.error:
        click.echo(fmt_error(result.error), err=True)
        return

    if result.exit_code == 0 and not quiet and not result.dry_run:
        click.echo(success_banner(zshrc, env=term_env))

    if result.switch is not None and not result.switch.skipped:
        colour = "green" if result.switch.success else "red"
        click.secho(result.switch.message, fg=colour)


if __name__ == "__main__":
    cli()
