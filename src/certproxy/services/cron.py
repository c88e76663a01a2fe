"""Crontab entry management."""

from __future__ import annotations

from certproxy.errors import CommandError, CronError
from certproxy.services import process


def read_crontab() -> str:
    """Current user's crontab, or an empty string when none is installed."""
    try:
        result = process.run(["crontab", "-l"], check=False)
    except CommandError as exc:
        raise CronError(str(exc), exit_code=exc.exit_code) from exc
    return result.stdout if result.returncode == 0 else ""


def merge_cron_line(existing: str, cron_line: str, marker: str) -> tuple[str, bool]:
    """Return (new crontab, replaced) with every ``marker`` line swapped for ``cron_line``."""
    lines = existing.splitlines()
    kept = [line for line in lines if marker not in line]
    replaced = len(kept) != len(lines)
    kept.append(cron_line)
    return "\n".join(kept) + "\n", replaced


def install_cron_line(cron_line: str, marker: str) -> bool:
    """Install ``cron_line`` once. Returns True if an older entry was replaced."""
    new_crontab, replaced = merge_cron_line(read_crontab(), cron_line, marker)
    try:
        process.run(["crontab", "-"], input=new_crontab)
    except CommandError as exc:
        raise CronError(f"Failed to install crontab: {exc}", exit_code=exc.exit_code) from exc
    return replaced
