"""
Shell command adapter — run external programs.

``run_command`` is the single place where ``subprocess.run`` is called.
Output streams straight to the terminal unless the caller asks to
capture it, so package managers, installers and sudo prompts behave
exactly as they would when typed by hand.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from shellstrap.adapters.base import Adapter, ExecutionContext
from shellstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)


class SudoUnavailable(RuntimeError):
    """Raised when a command needs root but sudo is not installed."""


@dataclass
class CommandResult:
    """Exit status and (when captured) output of one command."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def display(self) -> str:
        return shlex.join(self.argv)


def with_sudo(argv: list[str]) -> list[str]:
    """Prefix ``sudo`` unless already root.

    Raises:
        SudoUnavailable: Not root and no sudo on PATH.
    """
    if os.geteuid() == 0:
        return argv
    if shutil.which("sudo") is None:
        raise SudoUnavailable(f"'{argv[0]}' needs root privileges but sudo is not installed")
    return ["sudo", *argv]


def run_command(
    argv: list[str],
    *,
    sudo: bool = False,
    cwd: str | None = None,
    env_overrides: dict[str, str] | None = None,
    timeout: float | None = None,
    capture: bool = False,
) -> CommandResult:
    """Run one command to completion.

    No timeout unless one is given; the tools invoked here (package
    managers, git) apply their own.

    Raises:
        SudoUnavailable: ``sudo`` requested but impossible.
        FileNotFoundError: The program does not exist.
        subprocess.TimeoutExpired: ``timeout`` elapsed.
    """
    if sudo:
        argv = with_sudo(argv)

    env = None
    if env_overrides:
        env = os.environ.copy()
        env.update(env_overrides)

    logger.debug("Running: %s (cwd=%s)", shlex.join(argv), cwd)
    start = time.monotonic()
    result = subprocess.run(
        argv,
        cwd=cwd,
        env=env,
        timeout=timeout,
        capture_output=capture,
        text=True,
    )
    elapsed_ms = int((time.monotonic() - start) * 1000)

    return CommandResult(
        argv=argv,
        returncode=result.returncode,
        stdout=(result.stdout or "").strip() if capture else "",
        stderr=(result.stderr or "").strip() if capture else "",
        elapsed_ms=elapsed_ms,
    )


def receipt_from_result(adapter: str, action_id: str, result: CommandResult) -> Receipt:
    """Translate a finished command into a Receipt."""
    metadata = {"command": result.display, "return_code": result.returncode}
    if result.ok:
        return Receipt.success(
            adapter=adapter,
            action_id=action_id,
            output=result.stdout,
            duration_ms=result.elapsed_ms,
            metadata=metadata,
        )
    return Receipt.failure(
        adapter=adapter,
        action_id=action_id,
        error=result.stderr or f"{result.display} exited with code {result.returncode}",
        duration_ms=result.elapsed_ms,
        metadata=metadata,
    )


def guarded_run(adapter: str, action_id: str, argv: list[str], **kwargs) -> Receipt:
    """``run_command`` wrapped so that nothing escapes as an exception."""
    try:
        result = run_command(argv, **kwargs)
    except SudoUnavailable as e:
        return Receipt.failure(adapter=adapter, action_id=action_id, error=str(e))
    except FileNotFoundError:
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"Program not found: {argv[0]}",
            metadata={"command": shlex.join(argv)},
        )
    except subprocess.TimeoutExpired as e:
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"Command timed out after {e.timeout}s",
            metadata={"command": shlex.join(argv)},
        )
    except OSError as e:
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"Command execution error: {e}",
            metadata={"command": shlex.join(argv)},
        )
    return receipt_from_result(adapter, action_id, result)


class ShellCommandAdapter(Adapter):
    """Run an arbitrary program.

    Action params:
        argv (list[str]): Program and arguments.
        sudo (bool): Run with root privileges (default: False).
        cwd (str): Working directory.
        env (dict[str, str]): Extra environment variables.
        timeout (float): Seconds before giving up (default: none).
        capture (bool): Capture stdout/stderr instead of streaming.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        argv = context.params.get("argv")
        if not argv:
            return False, "Missing required param: 'argv'"
        if not isinstance(argv, list) or not all(isinstance(a, str) for a in argv):
            return False, "Param 'argv' must be a list of strings"

        cwd = context.working_dir
        if cwd and not Path(cwd).is_dir():
            return False, f"Working directory does not exist: {cwd}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.params
        return guarded_run(
            self.name,
            context.action.id,
            list(params["argv"]),
            sudo=bool(params.get("sudo", False)),
            cwd=context.working_dir,
            env_overrides=params.get("env"),
            timeout=params.get("timeout"),
            capture=bool(params.get("capture", False)),
        )
