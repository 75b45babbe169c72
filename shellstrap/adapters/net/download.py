"""
Download adapter — fetch a single file over HTTPS.

Writes to a sibling temp file and renames into place, so a dropped
connection never leaves a truncated installer script behind. Callers
that only need a script for one step download it into a
``tempfile.TemporaryDirectory`` they own.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import urlparse

from shellstrap import __version__
from shellstrap.adapters.base import Adapter, ExecutionContext
from shellstrap.core.models.action import Receipt

logger = logging.getLogger(__name__)

_CHUNK = 64 * 1024


class DownloadAdapter(Adapter):
    """HTTP(S) file downloads.

    Action params:
        url (str): Source URL.
        dest (str): Destination file.
        mode (int): Permission bits to apply after download.
        timeout (float): Socket timeout in seconds (default: none).
    """

    @property
    def name(self) -> str:
        return "download"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        url = context.params.get("url", "")
        if not url:
            return False, "Missing required param: 'url'"
        if urlparse(url).scheme not in ("https", "http"):
            return False, f"Unsupported URL scheme: {url}"
        if not context.params.get("dest"):
            return False, "Missing required param: 'dest'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        url = context.params["url"]
        dest = Path(context.params["dest"])
        mode = context.params.get("mode")
        timeout = context.params.get("timeout")

        logger.debug("Downloading %s → %s", url, dest)
        start = time.monotonic()
        try:
            size = self._fetch(url, dest, timeout)
            if mode is not None:
                dest.chmod(int(mode))
        except (urllib.error.URLError, OSError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Download failed for {url}: {e}",
                metadata={"url": url, "path": str(dest)},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info("Downloaded %s (%d bytes)", url, size)
        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=str(dest),
            duration_ms=elapsed_ms,
            metadata={"url": url, "path": str(dest), "size": size},
        )

    # ── Helpers ─────────────────────────────────────────────────

    @staticmethod
    def _fetch(url: str, dest: Path, timeout: float | None) -> int:
        dest.parent.mkdir(parents=True, exist_ok=True)
        request = urllib.request.Request(url, headers={"User-Agent": f"shellstrap/{__version__}"})

        fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=".part")
        size = 0
        try:
            with os.fdopen(fd, "wb") as out, urllib.request.urlopen(request, timeout=timeout) as resp:
                while chunk := resp.read(_CHUNK):
                    out.write(chunk)
                    size += len(chunk)
            os.replace(tmp_name, dest)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return size
