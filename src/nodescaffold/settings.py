from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from .cache import CacheStore
from .checks import Checks
from .ui.console import Console, get_console

VERBOSE_ENV = "VERBOSE"
PROXY_VARIABLES = ("HTTP_PROXY", "HTTPS_PROXY", "http_proxy", "https_proxy")
DEFAULT_TEMPLATE_ROOT = Path(__file__).resolve().parent / "tpl"
TARGET_NAMES = ("backend", "frontend")


def verbosity_from_env(environ: Optional[Mapping[str, str]] = None) -> int:
    """VERBOSE as a non-negative integer; anything else counts as 0."""
    environ = os.environ if environ is None else environ
    raw = (environ.get(VERBOSE_ENV) or "").strip()
    return int(raw) if re.fullmatch(r"[0-9]+", raw) else 0


def child_environment(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Environment map for spawned commands: the current one minus proxy settings."""
    environ = os.environ if environ is None else environ
    return {k: v for k, v in environ.items() if k not in PROXY_VARIABLES}


@dataclass
class RunContext:
    """Everything a step needs, passed explicitly instead of via cwd/os.environ."""
    project_root: Path
    template_root: Path = DEFAULT_TEMPLATE_ROOT
    env: Dict[str, str] = field(default_factory=child_environment)
    platform: str = sys.platform
    checks: Checks = field(default_factory=Checks)
    console: Console = field(default_factory=get_console)
    store: Optional[CacheStore] = None

    def __post_init__(self) -> None:
        self.project_root = Path(self.project_root).resolve()
        self.template_root = Path(self.template_root).resolve()
        if self.store is None:
            self.store = CacheStore(self.project_root)
