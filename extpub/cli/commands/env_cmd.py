"""Env command - show what the publishing policy sees in this environment."""

from __future__ import annotations

from pathlib import Path

import typer

from extpub.build.errors import ConfigurationError
from extpub.build.project import Build
from extpub.cli.context import build_context
from extpub.core.errors import ErrorCode
from extpub.core.result import Err
from extpub.output.console import Style
from extpub.publish.description import configure_build, load_build_description
from extpub.publish.environment import BRANCH_VARIABLE, FORK_VARIABLE, TAG_VARIABLE
from extpub.publish.policy import ReleaseOverridePolicy
from extpub.publish.root import (
    NEXUS_URL_VARIABLE,
    PASSWORD_VARIABLE,
    SNAPSHOT_REPO_URL_VARIABLE,
    USERNAME_VARIABLE,
)
from extpub.publish.signing_key import SigningCredential, missing_signing_variables


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def env(
    file: Path | None = typer.Option(
        None, "--file", "-f", help="Build description whose settings and properties apply"
    ),
) -> None:
    """Show the publishing environment (never prints secret values)."""
    ctx = build_context()
    console = ctx.console

    if file is None:
        build = Build(Path.cwd(), environ=ctx.environ, console=console)
    else:
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
        except ConfigurationError as e:
            console.error(str(e))
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    e = build.env
    policy = ReleaseOverridePolicy.for_build(build)

    console.header("Release")
    console.print(f"tag build ({TAG_VARIABLE}): {_yes_no(e.is_present(TAG_VARIABLE))}")
    console.print(f"forked build ({FORK_VARIABLE}): {_yes_no(e.is_present(FORK_VARIABLE))}")
    console.print(f"branch ({BRANCH_VARIABLE}): {e.get(BRANCH_VARIABLE) or '-'}")
    console.print(f"check publishes to the host: {_yes_no(policy.applies(e))}")
    console.print(f"release override: {policy.description}", Style.DIM)

    console.header("Signing")
    credential = SigningCredential.from_env(e)
    if credential is not None:
        console.success(f"signing key {credential.key_id} is available")
    else:
        console.warning("publications will not be signed")
        console.print(f"missing: {', '.join(missing_signing_variables(e))}", Style.DIM)

    console.header("Artifact host")
    console.print(f"nexus url: {e.get(NEXUS_URL_VARIABLE) or 'default'}")
    console.print(f"snapshot repository url: {e.get(SNAPSHOT_REPO_URL_VARIABLE) or 'default'}")
    console.print(f"username set: {_yes_no(e.is_present(USERNAME_VARIABLE))}")
    console.print(f"password set: {_yes_no(e.is_present(PASSWORD_VARIABLE))}")
