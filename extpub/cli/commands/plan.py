"""Plan command - configure a described build and simulate tasks."""

from __future__ import annotations

from pathlib import Path

import typer

from extpub.build.errors import ConfigurationError
from extpub.build.execution import TaskOutcome, execute
from extpub.cli.context import build_context
from extpub.core.errors import ErrorCode
from extpub.core.result import Err
from extpub.output.console import Style
from extpub.publish.description import configure_build, load_build_description

_OUTCOME_STYLES = {
    TaskOutcome.EXECUTED: Style.SUCCESS,
    TaskOutcome.SKIPPED: Style.DIM,
    TaskOutcome.DISABLED: Style.DIM,
    TaskOutcome.FAILED: Style.ERROR,
}


def plan(
    tasks: list[str] = typer.Argument(..., help="Task names or paths, e.g. publish or :lib:check"),
    file: Path = typer.Option(Path("extpub.toml"), "--file", "-f", help="Build description"),
) -> None:
    """Configure the described build and show what the requested tasks would do."""
    ctx = build_context()
    console = ctx.console

    description = load_build_description(file)
    if isinstance(description, Err):
        console.error(description.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    try:
        build = configure_build(
            description.value,
            file.resolve().parent,
            environ=ctx.environ,
            console=console,
        )
        report = execute(build, tasks)
    except ConfigurationError as e:
        console.error(str(e))
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    console.header("Summary")
    for result in report.results:
        detail = f" ({result.message})" if result.message else ""
        console.print(f"{result.outcome!s:>9}  {result.path}{detail}", _OUTCOME_STYLES[result.outcome])

    if report.failure is not None:
        raise typer.Exit(code=int(ErrorCode.BUILD_ERROR))
    console.success(f"{len(report.executed)} executed, {len(report.skipped)} skipped")
