import time
from pathlib import Path

from loguru import logger

SECONDS_PER_DAY = 86400


def sweep_expired_artifacts(
    log_dir: Path,
    patterns: list[str],
    retention_days: int,
    now: float | None = None,
) -> None:
    """Delete artifacts matching patterns whose mtime is older than retention_days.

    Best-effort: files that vanish or cannot be removed are skipped.
    A retention of 0 days disables the sweep.
    """
    if retention_days <= 0:
        return

    cutoff = (now if now is not None else time.time()) - retention_days * SECONDS_PER_DAY
    logger.debug("Rotating logs older than {} days in {}", retention_days, log_dir)

    removed = 0
    for pattern in patterns:
        for path in log_dir.glob(pattern):
            try:
                if path.is_file() and path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError as e:
                logger.debug("Skipping {} during rotation: {}", path, e)
    if removed:
        logger.debug("Removed {} expired artifacts", removed)
