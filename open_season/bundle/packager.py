"""Portable hunt bundles.

A bundle is a plain ZIP archive whose entries mirror a hunt directory:
the ledger file, every encrypted evidence payload, and an explicit entry
for every sub-directory. Nothing is decrypted or re-encrypted on the way;
the archive carries no metadata of its own and the hunt ID on import is
taken from the archive's file name.

Archives come from other machines, so every entry name is treated as
hostile on import and must resolve inside the new hunt directory.
"""

import os
import re
import shutil
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..utils.logging import get_logger
from ..vault.exceptions import (
    BundleEncodingError,
    BundleError,
    CaseAlreadyExistsError,
    CaseNotFoundError,
    PathTraversalError,
    VaultIOError,
)

logger = get_logger(__name__)

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


@dataclass
class ImportResult:
    """Outcome of importing a bundle."""

    case_id: str
    case_dir: Path
    files_written: int = 0
    directories_created: int = 0
    skipped: list[str] = field(default_factory=list)  # Rejected entry names

    @property
    def skipped_count(self) -> int:
        """Number of archive entries rejected as unsafe."""
        return len(self.skipped)


# ===================
# Export
# ===================


def export_hunt(hunt_dir: Path, output_path: Path) -> int:
    """
    Write a hunt directory to a bundle archive.

    The tree is walked in sorted order. Regular files become Deflate
    entries at their path relative to the hunt root; sub-directories become
    explicit directory entries; the hunt root itself is not recorded.
    Symbolic links are not followed or stored.

    Args:
        hunt_dir: Hunt directory to package
        output_path: Archive to create (overwritten if present)

    Returns:
        Number of entries written

    Raises:
        CaseNotFoundError: If hunt_dir is not a directory
        BundleEncodingError: If a path is not representable as UTF-8 text
        VaultIOError: If a file cannot be read or the archive written
    """
    hunt_dir = Path(hunt_dir)
    output_path = Path(output_path)

    if not hunt_dir.is_dir():
        raise CaseNotFoundError(str(hunt_dir))

    # Collect first so encoding problems surface before anything is written
    try:
        entries = list(_walk_hunt(hunt_dir, exclude=output_path.resolve()))
    except OSError as e:
        raise VaultIOError(f"Failed to read hunt directory {hunt_dir}: {e}") from e

    try:
        with zipfile.ZipFile(
            output_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            strict_timestamps=False,
        ) as zf:
            for path, arcname in entries:
                zf.write(path, arcname)
    except OSError as e:
        output_path.unlink(missing_ok=True)
        raise VaultIOError(f"Failed to write bundle {output_path}: {e}") from e

    logger.info(f"Exported {hunt_dir.name} to {output_path} ({len(entries)} entries)")
    return len(entries)


def _walk_hunt(hunt_dir: Path, exclude: Path) -> Iterator[tuple[Path, str]]:
    """Yield (path, archive name) pairs for a hunt in deterministic order."""

    def _raise(error: OSError) -> None:
        raise error

    for dirpath, dirnames, filenames in os.walk(hunt_dir, onerror=_raise):
        dirnames.sort()
        filenames.sort()
        current = Path(dirpath)

        rel_dir = current.relative_to(hunt_dir)
        if rel_dir != Path("."):
            yield current, _archive_name(rel_dir)

        for filename in filenames:
            path = current / filename
            if path.is_symlink():
                logger.warning(f"Not bundling symbolic link {path}")
                continue
            if not path.is_file():
                continue
            if path.resolve() == exclude:
                continue
            yield path, _archive_name(path.relative_to(hunt_dir))


def _archive_name(relative: Path) -> str:
    """Convert a relative path to a portable archive entry name."""
    name = relative.as_posix()
    try:
        name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise BundleEncodingError(
            f"Path is not representable as UTF-8 text: {name!r}"
        ) from e
    return name


# ===================
# Import
# ===================


def resolve_entry_path(target_dir: Path, entry_name: str) -> Path:
    """
    Resolve an archive entry name to a location inside ``target_dir``.

    Backslashes are treated as separators. Absolute names, drive-qualified
    names and ``..`` segments are rejected outright; the joined path is then
    resolved (following any existing symlinks) and must be a strict
    descendant of the resolved target directory.

    Args:
        target_dir: Directory the archive is being extracted into
        entry_name: Raw entry name from the archive

    Returns:
        Resolved destination path

    Raises:
        PathTraversalError: If the entry would land outside target_dir
    """
    normalized = entry_name.replace("\\", "/")

    if normalized.startswith("/") or _DRIVE_PREFIX.match(normalized):
        raise PathTraversalError(entry_name)

    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if not parts or ".." in parts:
        raise PathTraversalError(entry_name)

    root = Path(target_dir).resolve()
    try:
        destination = root.joinpath(*parts).resolve()
    except (OSError, ValueError) as e:
        raise PathTraversalError(entry_name) from e

    if destination == root or not destination.is_relative_to(root):
        raise PathTraversalError(entry_name)
    return destination


def import_hunt(
    archive_path: Path,
    destination_root: Path,
    show_progress: bool = False,
) -> ImportResult:
    """
    Materialize a bundle as a new hunt directory.

    The hunt ID is the archive's file name without its extension. Unsafe
    entries are skipped, logged and listed in the result; any other failure
    removes the partially extracted hunt before the error propagates.

    Args:
        archive_path: Bundle to import
        destination_root: Directory holding hunts
        show_progress: Whether to show a progress spinner

    Returns:
        ImportResult for the new hunt

    Raises:
        CaseAlreadyExistsError: If the hunt ID is already taken
        BundleError: If the archive name or contents are invalid
        VaultIOError: If the archive cannot be read or files written
    """
    archive_path = Path(archive_path)
    destination_root = Path(destination_root)

    case_id = archive_path.stem
    if not case_id or case_id in (".", "..") or "\\" in case_id:
        raise BundleError(f"Cannot derive a hunt ID from {archive_path.name!r}")

    target_dir = destination_root / case_id
    if target_dir.exists() or target_dir.is_symlink():
        raise CaseAlreadyExistsError(case_id)

    if not archive_path.is_file():
        raise VaultIOError(f"Bundle not found: {archive_path}")

    try:
        zf = zipfile.ZipFile(archive_path, "r")
    except zipfile.BadZipFile as e:
        raise BundleError(f"Not a valid bundle: {archive_path}") from e
    except OSError as e:
        raise VaultIOError(f"Failed to open bundle {archive_path}: {e}") from e

    with zf:
        try:
            destination_root.mkdir(parents=True, exist_ok=True)
            target_dir.mkdir()
        except FileExistsError as e:
            raise CaseAlreadyExistsError(case_id) from e
        except OSError as e:
            raise VaultIOError(f"Failed to create hunt directory {target_dir}: {e}") from e

        result = ImportResult(case_id=case_id, case_dir=target_dir)
        members = zf.infolist()

        try:
            if show_progress:
                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    transient=True,
                ) as progress:
                    task = progress.add_task(
                        f"Importing {len(members)} entries...", total=len(members)
                    )
                    for info in members:
                        _extract_entry(zf, info, target_dir, result)
                        progress.advance(task)
            else:
                for info in members:
                    _extract_entry(zf, info, target_dir, result)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            _discard(target_dir)
            raise BundleError(f"Corrupt bundle {archive_path}: {e}") from e
        except OSError as e:
            _discard(target_dir)
            raise VaultIOError(f"Failed to extract bundle {archive_path}: {e}") from e
        except BaseException:
            _discard(target_dir)
            raise

    if result.skipped:
        logger.warning(
            f"Imported {case_id} with {result.skipped_count} unsafe entries skipped"
        )
    else:
        logger.info(f"Imported {case_id} ({result.files_written} files)")
    return result


def _extract_entry(
    zf: zipfile.ZipFile,
    info: zipfile.ZipInfo,
    target_dir: Path,
    result: ImportResult,
) -> None:
    """Extract one archive member, skipping it if its path is unsafe."""
    try:
        destination = resolve_entry_path(target_dir, info.filename)
    except PathTraversalError:
        logger.warning(f"Skipping unsafe bundle entry {info.filename!r}")
        result.skipped.append(info.filename)
        return

    if info.is_dir():
        destination.mkdir(parents=True, exist_ok=True)
        result.directories_created += 1
        return

    destination.parent.mkdir(parents=True, exist_ok=True)
    with zf.open(info) as src, open(destination, "wb") as dst:
        shutil.copyfileobj(src, dst)
    result.files_written += 1


def _discard(target_dir: Path) -> None:
    """Remove a partially imported hunt."""
    logger.error(f"Import failed; removing partial hunt {target_dir}")
    shutil.rmtree(target_dir, ignore_errors=True)
