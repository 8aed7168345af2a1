from __future__ import annotations

import os
import secrets
import string
import zipfile
from pathlib import Path

from .models import PackageFile

TEMP_NAME_LENGTH = 15
_NAME_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


class PackageError(RuntimeError):
    pass


def random_archive_name(length: int = TEMP_NAME_LENGTH) -> str:
    # No collision check: 62**15 names.
    return "".join(secrets.choice(_NAME_ALPHABET) for _ in range(length)) + ".zip"


def _arcname(p: Path, base: Path) -> str:
    return str(p.relative_to(base)).replace(os.sep, "/")


def _collect(root: Path) -> tuple[list[Path], list[Path]]:
    def _raise(err: OSError) -> None:
        raise err

    directories: list[Path] = [root]
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        current = Path(dirpath)
        dirnames.sort()
        for name in dirnames:
            directories.append(current / name)
        for name in sorted(filenames):
            files.append(current / name)
    return directories, files


def package_path(path: str | Path, *, work_dir: str | Path | None = None) -> PackageFile:
    """
    Turn ``path`` into a single uploadable file.

    A regular file is used as-is. A directory is zipped into a randomly named
    archive in ``work_dir`` (default: the current directory). Entry names are
    relative to the directory's parent, so the directory's own name is the
    top-level folder in the archive. The caller owns deleting temporary archives.
    """
    src = Path(path).expanduser()
    if not src.exists():
        raise PackageError(f"Path does not exist: {src}")
    if not src.is_dir():
        return PackageFile(path=src, is_temporary=False)

    root = src.resolve()
    base = root.parent
    try:
        directories, files = _collect(root)
    except OSError as e:
        raise PackageError(f"Failed to read directory {root}: {e}") from e

    out_dir = Path(work_dir) if work_dir is not None else Path.cwd()
    archive = (out_dir / random_archive_name()).resolve()
    try:
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for d in directories:
                zf.write(d, arcname=_arcname(d, base) + "/")
            for f in files:
                zf.write(f, arcname=_arcname(f, base))
    except (OSError, zipfile.BadZipFile) as e:
        archive.unlink(missing_ok=True)
        raise PackageError(f"Failed to write package archive {archive}: {e}") from e

    return PackageFile(path=archive, is_temporary=True)
