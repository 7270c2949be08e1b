# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from .checks import Checks
from .errors import ScaffoldError
from .prereqs import check_environment
from .runner import reset_targets, run_targets
from .settings import DEFAULT_TEMPLATE_ROOT, TARGET_NAMES, RunContext, verbosity_from_env
from .targets import default_targets
from .ui.console import Console, get_console, set_console


def report_failure(error: ScaffoldError) -> None:
    console = get_console()
    details = [f"{k}: {v}" for k, v in error.details.items() if k != "hint"]
    if error.target:
        details.insert(0, f"target: {error.target}")
    if error.step:
        details.insert(1 if error.target else 0, f"step: {error.step}")
    console.print_error(
        error.kind.replace("_", " ").capitalize(),
        error.message,
        details=details or None,
        suggestion=error.details.get("hint"),
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--init", is_flag=True, default=False, help="Recreate the project: remove the backend and frontend directories first.")
@click.option("-v", "--verbose", count=True, help="Increase verbose logging (repeatable). Adds to $VERBOSE.")
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--project-dir",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory in which backend/ and frontend/ are created",
)
@click.option(
    "--template-dir",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Template root (defaults to the bundled templates)",
)
def cli(init, verbose, debug, project_dir, template_dir):
    """Set up the backend and frontend directories of the video conversion project."""
    console = Console(verbosity=verbosity_from_env() + verbose, debug=debug)
    set_console(console)

    project_dir.mkdir(parents=True, exist_ok=True)
    ctx = RunContext(
        project_root=project_dir,
        template_root=template_dir or DEFAULT_TEMPLATE_ROOT,
        checks=Checks(console),
        console=console,
    )

    if init:
        for name in reset_targets(ctx, TARGET_NAMES):
            console.print_info(f"Removed {name}/")

    targets = default_targets(ctx.platform)
    console.print_run_started(
        project=str(ctx.project_root),
        templates=str(ctx.template_root),
        targets=[t.name for t in targets],
    )

    try:
        check_environment(ctx)
        results = run_targets(targets, ctx)
    except ScaffoldError as e:
        console.print_results(ctx.checks.total, ctx.checks.passed, ctx.checks.failed)
        report_failure(e)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    for r in results:
        console.print_debug(f"{r.name}: {r.executed} executed, {r.cached} cached", level=1)
    console.print_results(ctx.checks.total, ctx.checks.passed, ctx.checks.failed)

    if not ctx.checks.all_passed:
        sys.exit(1)


if __name__ == "__main__":
    cli()
