"""Filesystem writes that honour --dry-run."""

from __future__ import annotations

import shutil
from pathlib import Path

from rich.console import Console

console = Console()


def notice(message: str) -> None:
    """Print a dry-run notice verbatim (paths and resolvers may contain brackets)."""
    console.print(f"[dry-run] {message}", style="cyan", markup=False, highlight=False)


def ensure_dir(path: Path, *, dry_run: bool = False) -> None:
    if dry_run:
        notice(f"Would create directory: {path}")
        return
    path.mkdir(parents=True, exist_ok=True)


def remove_tree(path: Path, *, dry_run: bool = False) -> bool:
    """Remove ``path`` if it exists. Returns True if something was (or would be) removed."""
    if dry_run:
        notice(f"Would remove directory if it exists: {path}")
        return path.exists()
    if not path.exists():
        return False
    shutil.rmtree(path)
    return True


def copy_file(src: Path, dst: Path, *, label: str = "file", dry_run: bool = False) -> None:
    if dry_run:
        notice(f"Would copy {label}: {src} -> {dst}")
        return
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dst)
    shutil.copymode(src, dst)


def write_text(path: Path, content: str, *, label: str = "file", dry_run: bool = False) -> None:
    if dry_run:
        notice(f"Would write {label} to: {path}")
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
