"""
Backups and atomic writes for the stored collection.

Before a stored file is replaced, its previous contents are copied to
``<stem>_<timestamp>.json`` in the backup directory. A RetentionPolicy
decides which of those copies survive afterwards.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_KEEP_COUNT = 10
DEFAULT_KEEP_DAYS = 30
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"
TIMESTAMP_PATTERN = re.compile(r"_(\d{8}_\d{6}_\d{6})\.json$")


@dataclass(frozen=True)
class RetentionPolicy:
    """How many backups to keep.

    The ``keep_count`` newest backups always survive. Older ones are removed
    once they are more than ``keep_days`` old, or straight away when
    ``keep_days`` is None.
    """

    keep_count: int = DEFAULT_KEEP_COUNT
    keep_days: int | None = DEFAULT_KEEP_DAYS

    def is_expired(self, rank: int, taken_at: datetime | None, now: datetime) -> bool:
        """Whether the backup at *rank* (0 = newest) should be deleted."""
        if rank < self.keep_count:
            return False
        if self.keep_days is None:
            return True
        # Unparseable names are left alone
        return taken_at is not None and now - taken_at > timedelta(days=self.keep_days)


def parse_backup_timestamp(filename: str) -> datetime | None:
    """Timestamp embedded in a backup filename, or None."""
    match = TIMESTAMP_PATTERN.search(filename)
    if match is None:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def create_backup(file_path: Path, backup_dir: Path | None = None) -> Path:
    """Copy *file_path* into *backup_dir* under a timestamped name.

    Raises:
        FileNotFoundError: If there is nothing to back up
    """
    source = Path(file_path)
    if not source.is_file():
        raise FileNotFoundError(f"Nothing to back up at {source}")

    target_dir = Path(backup_dir) if backup_dir is not None else source.parent / "backups"
    target_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime(TIMESTAMP_FORMAT)
    target = target_dir / f"{source.stem}_{stamp}{source.suffix}"
    shutil.copy2(source, target)
    return target


def cleanup_old_backups(
    backup_dir: Path,
    stem: str,
    policy: RetentionPolicy | None = None,
) -> list[Path]:
    """Delete the backups of *stem* that *policy* no longer keeps.

    Returns:
        The deleted paths
    """
    folder = Path(backup_dir)
    if not folder.is_dir():
        return []

    policy = policy or RetentionPolicy()
    now = datetime.now()
    # Timestamps sort lexically, so name order is age order
    candidates = sorted(folder.glob(f"{stem}_*.json"), key=lambda p: p.name, reverse=True)

    removed = []
    for rank, path in enumerate(candidates):
        if policy.is_expired(rank, parse_backup_timestamp(path.name), now):
            path.unlink()
            removed.append(path)

    if removed:
        logger.debug("Pruned %d backup(s) of %s", len(removed), stem)
    return removed


def safe_write_json(
    file_path: Path,
    data: Any,
    backup_dir: Path | None = None,
    policy: RetentionPolicy | None = None,
    backup: bool = True,
) -> Path | None:
    """Replace *file_path* with *data* as JSON, atomically.

    The JSON is written to a temporary file beside the target and renamed
    over it, so readers never see a partial file. When *backup* is set and
    the target already exists, it is copied aside first and old copies are
    pruned according to *policy*.

    Returns:
        The new backup's path, if one was made

    Raises:
        ValueError: If *data* is not JSON-serializable
        OSError: If the file cannot be written
    """
    target = Path(file_path)

    try:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Cannot serialize data to JSON: {e}") from e

    made = None
    if backup and target.exists():
        folder = Path(backup_dir) if backup_dir is not None else target.parent / "backups"
        made = create_backup(target, folder)
        cleanup_old_backups(folder, target.stem, policy)

    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload + "\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except OSError:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise

    return made
