# cache.py
from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Set, Union

from .errors import CorruptCache
from .process import format_argv

# ---------------------------------------------------------------------
# Core idea
# ---------------------------------------------------------------------
# Step-level "already done" cache, one record per target:
#
#   <project>/.<target>.steps.json
#     {"version": 1, "target": "backend",
#      "commands": [...], "files": [...], "directories": [...]}
#
# The record sits next to (not inside) the target directory. Membership is
# advisory: callers re-check the real condition (file/dir exists) before
# trusting a hit. If the target directory is gone, the record is discarded.
#
# Example usage in runner (high-level):
#   store = CacheStore(project_root)
#   cache = store.load("backend")
#   try:
#       run_steps(cache)
#   finally:
#       store.save("backend", cache)
# ---------------------------------------------------------------------

CACHE_VERSION = 1
CACHE_FILE_PATTERN = ".{target}.steps.json"


@dataclass(frozen=True)
class CommandKey:
    cmd: str  # canonical form, see format_argv

    @classmethod
    def of(cls, argv: Sequence[str]) -> "CommandKey":
        return cls(format_argv(argv))


@dataclass(frozen=True)
class FileKey:
    path: str


@dataclass(frozen=True)
class DirectoryKey:
    path: str


StepKey = Union[CommandKey, FileKey, DirectoryKey]


def _norm(path: str | Path) -> str:
    # stable across platforms and across "./x" vs "x"
    return Path(path).as_posix()


class StepCache:
    """In-memory map of StepKey -> done for one target."""

    def __init__(self, target: str, done: Optional[Dict[StepKey, bool]] = None):
        self.target = target
        self._done: Dict[StepKey, bool] = dict(done or {})

    def __len__(self) -> int:
        return sum(1 for flag in self._done.values() if flag)

    def __contains__(self, key: StepKey) -> bool:
        return self._done.get(key, False)

    def mark(self, key: StepKey) -> None:
        self._done[key] = True

    # ---- commands ----
    def is_command_done(self, argv: Sequence[str]) -> bool:
        return CommandKey.of(argv) in self

    def mark_command_done(self, argv: Sequence[str]) -> None:
        self.mark(CommandKey.of(argv))

    # ---- files ----
    def is_file_done(self, path: str | Path) -> bool:
        return FileKey(_norm(path)) in self

    def mark_file_done(self, path: str | Path) -> None:
        self.mark(FileKey(_norm(path)))

    # ---- directories ----
    def is_directory_done(self, path: str | Path) -> bool:
        return DirectoryKey(_norm(path)) in self

    def mark_directory_done(self, path: str | Path) -> None:
        self.mark(DirectoryKey(_norm(path)))

    # ---- views ----
    def _values(self, kind: type) -> Set[str]:
        out: Set[str] = set()
        for key, flag in self._done.items():
            if flag and isinstance(key, kind):
                out.add(key.cmd if isinstance(key, CommandKey) else key.path)
        return out

    @property
    def commands(self) -> Set[str]:
        return self._values(CommandKey)

    @property
    def files(self) -> Set[str]:
        return self._values(FileKey)

    @property
    def directories(self) -> Set[str]:
        return self._values(DirectoryKey)

    # ---- serialization ----
    def to_dict(self) -> Dict:
        return {
            "version": CACHE_VERSION,
            "target": self.target,
            "commands": sorted(self.commands),
            "files": sorted(self.files),
            "directories": sorted(self.directories),
        }

    @classmethod
    def from_dict(cls, target: str, data: Dict) -> "StepCache":
        cache = cls(target)
        for cmd in data.get("commands", []) or []:
            cache.mark(CommandKey(str(cmd)))
        for path in data.get("files", []) or []:
            cache.mark_file_done(path)
        for path in data.get("directories", []) or []:
            cache.mark_directory_done(path)
        return cache


def _read_record(path: Path, target: str) -> StepCache:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CorruptCache(target, str(path), str(e)) from e
    if not isinstance(data, dict) or data.get("version") != CACHE_VERSION:
        raise CorruptCache(target, str(path), f"unsupported format (expected version {CACHE_VERSION})")
    return StepCache.from_dict(target, data)


class CacheStore:
    """
    File-based store of step caches:
      root/
        .<target>.steps.json
        <target>/            (the scaffolded directory itself)
    """

    def __init__(self, root: str | Path = "."):
        self.root = Path(root).resolve()

    def record_path(self, target: str) -> Path:
        return self.root / CACHE_FILE_PATTERN.format(target=target)

    def target_dir(self, target: str) -> Path:
        return self.root / target

    def exists(self, target: str) -> bool:
        return self.record_path(target).is_file()

    def discard(self, target: str) -> bool:
        """Delete the record for `target`. Returns True if there was one."""
        path = self.record_path(target)
        if path.is_file():
            path.unlink()
            return True
        return False

    def load(self, target: str) -> StepCache:
        """
        Load the cache for `target`.

        A record whose target directory no longer exists is deleted and an
        empty cache is returned: removing the directory forgets its progress.
        """
        path = self.record_path(target)
        if path.is_file() and not self.target_dir(target).is_dir():
            path.unlink()
        if not path.is_file():
            return StepCache(target)
        return _read_record(path, target)

    def save(self, target: str, cache: StepCache) -> Path:
        """Persist `cache` for `target` (write to a temp file, then atomic rename)."""
        path = self.record_path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(cache.to_dict(), sort_keys=True, indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=str(path.parent))
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            tmp.replace(path)
        finally:
            if tmp.exists():
                tmp.unlink(missing_ok=True)
        return path
