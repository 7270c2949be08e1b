# prereqs.py
from __future__ import annotations

import re
from typing import Optional, Tuple

from .errors import MissingPrerequisite
from .process import ProcessError, run_process, which
from .settings import RunContext

SUPPORTED_PLATFORMS = ("linux", "darwin", "win32")
NPM_MIN_VERSION = "6.13.4"
INSTALL_MSG = "Please install the tools"

TOOL_HINTS = {
    "npm": f"Install Node.js (includes npm) {NPM_MIN_VERSION} or higher, or fix PATH.",
    "npx": "Install Node.js (includes npx) or fix PATH.",
    "where": r"Add %SystemRoot%\System32 to the PATH.",
    "ffmpeg": "Install ffmpeg (e.g. apt-get install ffmpeg / brew install ffmpeg).",
}


def parse_version(text: str) -> Optional[Tuple[int, ...]]:
    """'6.13.4' -> (6, 13, 4); 'v18.2.0-rc1' -> (18, 2, 0). None if no digits."""
    m = re.search(r"\d+(?:\.\d+)*", text or "")
    if not m:
        return None
    return tuple(int(p) for p in m.group(0).split("."))


def version_at_least(version: Tuple[int, ...], minimum: Tuple[int, ...]) -> bool:
    width = max(len(version), len(minimum))
    return version + (0,) * (width - len(version)) >= minimum + (0,) * (width - len(minimum))


def _require(ctx: RunContext, passed: bool, description: str, tool: str, message: str) -> None:
    if not ctx.checks.ok(passed, description):
        raise MissingPrerequisite(tool=tool, message=message, hint=TOOL_HINTS.get(tool))


def check_os(ctx: RunContext) -> None:
    _require(
        ctx,
        ctx.platform in SUPPORTED_PLATFORMS,
        f"Operating system ({ctx.platform}) must be one of {', '.join(SUPPORTED_PLATFORMS)}",
        tool="os",
        message="Please use Windows, macOS or Linux",
    )
    if ctx.platform == "win32":
        _require(
            ctx,
            which("where", ctx.env) is not None,
            "The program where must be found in the PATH",
            tool="where",
            message=f"{INSTALL_MSG}: 'where' is not on the PATH",
        )


def check_npm(ctx: RunContext, prog: str = "npm", min_version: str = NPM_MIN_VERSION) -> str:
    """Verify npm is on the PATH and recent enough. Returns the version string."""
    _require(
        ctx,
        which(prog, ctx.env) is not None,
        f"Node.js package manager ({prog}) must be found in the PATH",
        tool=prog,
        message=f"{INSTALL_MSG}: ({prog}) {min_version} or higher",
    )

    argv = [prog, "-version"]
    try:
        result = run_process(argv, cwd=ctx.project_root, env=ctx.env, capture=True)
    except ProcessError as e:
        ctx.checks.fail(f"'{e.cmd}' runs")
        raise MissingPrerequisite(tool=prog, message=f"Can not run '{e.cmd}': {e.reason()}", hint=TOOL_HINTS.get(prog))

    lines = result.stdout_lines()
    line = lines[0].strip() if lines else ""
    ctx.console.print_debug(f"Just read line {line}", level=1)

    version = line.split()[0] if line.split() else ""
    parsed = parse_version(version)
    _require(
        ctx,
        parsed is not None,
        f"'{' '.join(argv)}' version line contains version '{version}'",
        tool=prog,
        message=f"Could not read a version from '{' '.join(argv)}' output: {line!r}",
    )

    _require(
        ctx,
        version_at_least(parsed, parse_version(min_version)),
        f"{prog} version ({version}) must be at least '{min_version}'",
        tool=prog,
        message=f"{prog} {version} is older than {min_version}",
    )
    return version


def check_environment(ctx: RunContext) -> None:
    """All prerequisites; the first failure raises MissingPrerequisite."""
    check_os(ctx)
    check_npm(ctx)
