"""Package a service directory into an uploadable bundle"""

import fnmatch
import hashlib
import os
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from wedeploy_cli.constants import BUNDLE_IGNORED


@dataclass
class Bundle:
    """Packaged service ready for upload."""

    path: Path
    size: int
    sha1: str

    def cleanup(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


def _is_ignored(relative: str, patterns: List[str]) -> bool:
    parts = relative.split("/")
    for pattern in patterns:
        if fnmatch.fnmatch(relative, pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in parts):
            return True
    return False


def iter_files(source: Path, ignore: Optional[List[str]] = None):
    """Yield (absolute, relative) paths of files to include, sorted."""
    patterns = list(BUNDLE_IGNORED) + list(ignore or [])

    for root, dirs, files in os.walk(source):
        root_path = Path(root)
        rel_root = root_path.relative_to(source).as_posix()
        dirs[:] = sorted(
            d
            for d in dirs
            if not _is_ignored(d if rel_root == "." else f"{rel_root}/{d}", patterns)
        )
        for name in sorted(files):
            relative = name if rel_root == "." else f"{rel_root}/{name}"
            if _is_ignored(relative, patterns):
                continue
            yield root_path / name, relative


def pack(source: Path, ignore: Optional[List[str]] = None) -> Bundle:
    """
    Zip a service directory into a temporary file.

    Args:
        source: Service directory
        ignore: Extra glob patterns to leave out (deployIgnore)

    Returns:
        Bundle with path, size and SHA1 of the archive
    """
    source = Path(source)
    fd, name = tempfile.mkstemp(prefix=f"{source.name}-", suffix=".pod")
    os.close(fd)
    path = Path(name)

    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for absolute, relative in iter_files(source, ignore):
            archive.write(absolute, relative)

    sha1 = hashlib.sha1()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            sha1.update(chunk)

    return Bundle(path=path, size=path.stat().st_size, sha1=sha1.hexdigest())
