from __future__ import annotations

import os
from dataclasses import dataclass

from extpub.core.env import EnvironmentVariables
from extpub.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    environ: dict[str, str]
    console: ConsoleProtocol

    @property
    def env(self) -> EnvironmentVariables:
        return EnvironmentVariables(self.environ)


def build_context() -> CLIContext:
    return CLIContext(environ=dict(os.environ), console=RichConsole())
