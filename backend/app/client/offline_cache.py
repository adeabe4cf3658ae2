"""Last-known-good copies of API reads, one JSON file per key.

Used only when the server cannot answer; anything read from here is
reported to the caller as stale.
"""

import hashlib
import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.utils.jsonsafe import safe_json_loads

logger = logging.getLogger("incorpdesk.client.cache")

_SAFE = re.compile(r"[^A-Za-z0-9_.-]+")


class OfflineCache:
    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        # Readable prefix plus a hash so distinct keys never collide
        readable = _SAFE.sub("_", key).strip("_")[:60]
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]
        return self.directory / f"{readable}-{digest}.json"

    def put(self, key: str, data: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        entry = {"savedAt": datetime.now(timezone.utc).isoformat(), "data": data}
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(json.dumps(entry, default=str), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            logger.warning(f"Could not cache {key}: {e}")

    def get(self, key: str) -> Any | None:
        """Cached data for ``key``, or None when absent or unreadable."""
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read cache for {key}: {e}")
            return None
        entry = safe_json_loads(raw)
        if not isinstance(entry, dict) or "data" not in entry:
            return None
        return entry["data"]

    def clear(self) -> None:
        if not self.directory.is_dir():
            return
        for path in self.directory.glob("*.json"):
            path.unlink(missing_ok=True)
