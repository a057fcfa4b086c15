import base64
import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class GlobOptions:
    pattern: str = "**/*"
    # Maximum directory depth below the root; None means unlimited, 1 means root only
    deep: Optional[int] = None
    only_files: bool = True


class LocalFilesystem:
    """Local folder helpers for staging uploads and saving downloads."""

    def create_folder(self, path: PathLike) -> Path:
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def remove_directory(self, path: PathLike) -> bool:
        path = Path(path)
        if not path.exists():
            return False
        shutil.rmtree(path)
        return True

    def folder_exists(self, path: PathLike) -> bool:
        return Path(path).is_dir()

    def is_populated_folder(self, path: PathLike) -> bool:
        path = Path(path)
        return path.is_dir() and any(path.iterdir())

    def write_file(self, path: PathLike, content: Union[str, bytes], encoding: str = "utf-8") -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding=encoding)
        return path

    def read_file(self, path: PathLike, encoding: str = "utf-8") -> str:
        """Reads a file as text, or as base64 text when `encoding` is 'base64'.

        Raises OSError (or UnicodeDecodeError) when the file cannot be read.
        """
        path = Path(path)
        if encoding == "base64":
            return base64.b64encode(path.read_bytes()).decode("ascii")
        return path.read_text(encoding=encoding)

    def glob_files(self, root: PathLike, options: Optional[GlobOptions] = None) -> List[Path]:
        """Absolute paths under `root`, sorted so uploads are reproducible."""
        options = options or GlobOptions()
        root = Path(root).resolve()
        if not root.is_dir():
            logger.debug(f"{root} is not a directory, nothing to glob")
            return []

        matches = []
        for path in root.glob(options.pattern):
            if options.only_files and not path.is_file():
                continue
            if options.deep is not None and len(path.relative_to(root).parts) > options.deep:
                continue
            matches.append(path)
        return sorted(matches)

    def relative_path(self, root: PathLike, path: PathLike) -> str:
        """Path of `path` below `root`, always with forward slashes."""
        return Path(path).resolve().relative_to(Path(root).resolve()).as_posix()


def get_path_parts(file_path: str) -> List[str]:
    """'./src\\v1/a.md' -> ['src', 'v1', 'a.md']"""
    return [part for part in re.split(r"[\\/]+", file_path) if part and part != "."]


def get_file_name_from_path(file_path: str) -> str:
    parts = get_path_parts(file_path)
    return parts[-1] if parts else ""


def get_directory_parts_from_path(file_path: str) -> List[str]:
    return get_path_parts(file_path)[:-1]
