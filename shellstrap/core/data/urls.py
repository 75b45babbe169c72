"""
Download locations for installer scripts and single-file tools.

Pure data. No logic.
"""

from __future__ import annotations

# Universal package-manager shim (icy/pacapt, "ng" branch).
PACAPT_URL = "https://github.com/icy/pacapt/raw/ng/pacapt"

# pacapt answers to "pacman" as well; the link is created next to the shim.
PACMAN_LINK = "/usr/local/bin/pacman"

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

# Common Homebrew prefixes, Apple silicon first.
HOMEBREW_PREFIXES = ("/opt/homebrew", "/usr/local", "/home/linuxbrew/.linuxbrew")

GET_PIP_URL = "https://bootstrap.pypa.io/get-pip.py"

PRETTYPING_URL = "https://raw.githubusercontent.com/denilsonsa/prettyping/master/prettyping"

ZINIT_REMOTE = "https://github.com/zdharma-continuum/zinit.git"
