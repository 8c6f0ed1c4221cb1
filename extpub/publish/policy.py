"""Release-override policy.

Ordinary change verification never talks to the artifact host. Some builds,
typically automated upgrades of this very publishing setup, must prove that
publishing still works before they merge. For those, ``check`` is wired to
upload to the host and close the staging repository.

Which builds qualify is decided by a ``ReleaseOverridePolicy``. The default
matches the CI branch against a set of known upgrade branch names; tests and
other CI setups can register any predicate in the build's service registry:

    build.registry.register(ReleaseOverridePolicy.never())
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from extpub.build.project import Build
from extpub.core.config import OVERRIDE_BRANCH_NAMES, PublishSettings
from extpub.core.env import EnvironmentVariables
from extpub.publish.environment import BRANCH_VARIABLE

__all__ = ["ReleaseOverridePolicy"]

type OverridePredicate = Callable[[EnvironmentVariables], bool]


@dataclass(frozen=True, slots=True)
class ReleaseOverridePolicy:
    description: str
    predicate: OverridePredicate

    def applies(self, env: EnvironmentVariables) -> bool:
        return self.predicate(env)

    @classmethod
    def branch_names(
        cls,
        branches: Iterable[str] = OVERRIDE_BRANCH_NAMES,
        variable: str = BRANCH_VARIABLE,
    ) -> ReleaseOverridePolicy:
        names = frozenset(branches)

        def matches(env: EnvironmentVariables) -> bool:
            branch = env.get(variable)
            return branch is not None and branch in names

        listed = ", ".join(sorted(names)) or "<none>"
        return cls(description=f"{variable} in {{{listed}}}", predicate=matches)

    @classmethod
    def never(cls) -> ReleaseOverridePolicy:
        return cls(description="never", predicate=lambda _: False)

    @classmethod
    def for_build(cls, build: Build) -> ReleaseOverridePolicy:
        """The policy registered with ``build``, else the configured branch names."""
        registered = build.registry.get(cls)
        if registered is not None:
            return registered
        settings = build.registry.get(PublishSettings) or PublishSettings()
        return cls.branch_names(settings.override_branches)
