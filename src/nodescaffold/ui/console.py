"""Console output formatting utilities for nodescaffold."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, verbosity: int = 0, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            verbosity: 0 = checks and errors only, 1 = also step decisions,
                       2+ = also process/cache internals
            debug: If True, show stack traces on failure
        """
        self.verbosity = max(0, int(verbosity))
        self.debug = debug

    def print_run_started(
        self,
        project: str,
        templates: str,
        targets: list[str],
    ) -> None:
        """Print run start information."""
        print("\nSETUP STARTED")
        print(f"Project: {project}")
        print(f"Templates: {templates}")
        print(f"Targets: {', '.join(targets)}")
        print()

    def print_target_start(self, name: str) -> None:
        """Print target start message."""
        print(f"\nTARGET: {name}")

    def print_step(self, name: str, cached: bool) -> None:
        """Print step decision (verbose only)."""
        if self.verbosity >= 1:
            state = "cached" if cached else "running"
            print(f"STEP: {name} ({state})", file=sys.stderr)

    def print_check(self, number: int, passed: bool, description: str) -> None:
        """Print one verification check, TAP style."""
        prefix = "ok" if passed else "not ok"
        print(f"{prefix} {number} - {description}")

    def print_cache_discarded(self, target: str, path: str) -> None:
        """Print stale cache removal."""
        print(f"CACHE: discarded {path} ({target}/ does not exist)")

    def print_cache_saved(self, target: str, path: str, entries: int) -> None:
        """Print cache save message."""
        self.print_debug(f"cache for {target}: saved {entries} entries to {path}")

    def print_results(self, total: int, passed: int, failed: int) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        print(f"  checks: {total}")
        print(f"  passed: {passed}")
        print(f"  failed: {failed}")
        print(f"1..{total}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str, level: int = 2) -> None:
        """Print debug message (only if verbosity reaches `level`)."""
        if self.debug or self.verbosity >= level:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
