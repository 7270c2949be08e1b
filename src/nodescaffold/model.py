# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class RunCommand:
    """Run an external command once per target."""
    argv: Tuple[str, ...]
    # sys.platform prefixes this command is restricted to (None = everywhere)
    platforms: Optional[Tuple[str, ...]] = None

    @property
    def name(self) -> str:
        return f"Command '{' '.join(self.argv)}'"


@dataclass(frozen=True)
class InstallFile:
    """
    Copy a template into the target.

    The template lives at <template_root>/<target>/<subdir>/<template or destination>
    and lands at <target>/<subdir>/<destination>.

    When `match` is given, `destination` is ignored and the destination file name
    is the single file under <subdir> matching that glob (generated files with
    timestamped names, e.g. Sequelize migrations).
    """
    subdir: str
    destination: str
    template: Optional[str] = None
    match: Optional[str] = None

    @property
    def name(self) -> str:
        label = self.match or self.destination
        return f"File '{self.subdir}/{label}'"


@dataclass(frozen=True)
class EnsureDirectory:
    """Create a directory inside the target if it is not there yet."""
    path: str

    @property
    def name(self) -> str:
        return f"Directory '{self.path}'"


@dataclass(frozen=True)
class PatchFile:
    """Replace one exact line of a generated file, once."""
    path: str
    line: str
    replacement: str

    @property
    def name(self) -> str:
        return f"Patch '{self.path}'"


@dataclass(frozen=True)
class EnvEntry:
    """
    One VAR='path' line of a generated .env file.

    The executable is looked up on PATH first (if `use_path`), then searched
    for recursively below `search_root` (relative to the target directory
    unless absolute).
    """
    variable: str
    executable: str
    search_root: str
    use_path: bool = True


@dataclass(frozen=True)
class WriteEnvFile:
    """Write a .env file pointing at located executables, unless one exists."""
    path: str
    entries: Tuple[EnvEntry, ...]

    @property
    def name(self) -> str:
        return f"Env file '{self.path}'"


Step = Union[RunCommand, InstallFile, EnsureDirectory, PatchFile, WriteEnvFile]


@dataclass
class Target:
    """
    One scaffolded half of the project (backend or frontend).

    `bootstrap` steps run from the project root, only while the target
    directory does not exist yet (generators that create the directory
    themselves, e.g. create-react-app).
    """
    name: str
    steps: List[Step]
    bootstrap: List[Step] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
