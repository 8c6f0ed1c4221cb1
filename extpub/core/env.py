"""Environment variable access with a test override.

CI exposes everything the publishing policy branches on (tag, branch, fork,
credentials) as environment variables. Tests cannot easily change the process
environment of a build, so when the build property ``__TESTING`` is ``"true"``
every lookup of ``NAME`` reads the build property ``__TESTING_NAME`` instead.

Empty values are treated as absent.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

__all__ = ["EnvironmentVariables", "TESTING_PROPERTY"]

TESTING_PROPERTY = "__TESTING"


def _empty_properties() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class EnvironmentVariables:
    """Read-only view over the process environment and build properties."""

    environ: Mapping[str, str]
    properties: Mapping[str, str] = field(default_factory=_empty_properties)

    @property
    def testing(self) -> bool:
        return self.properties.get(TESTING_PROPERTY) == "true"

    def get(self, name: str) -> str | None:
        """Return the value of ``name``, or None when unset or blank."""
        if self.testing:
            raw = self.properties.get(f"{TESTING_PROPERTY}_{name}")
        else:
            raw = self.environ.get(name)
        if raw is None or not raw.strip():
            return None
        return raw

    def is_present(self, name: str) -> bool:
        return self.get(name) is not None
