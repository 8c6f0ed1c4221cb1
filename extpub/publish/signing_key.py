"""GPG signing credential sourced from the environment."""

from __future__ import annotations

from dataclasses import dataclass, field

from extpub.core.env import EnvironmentVariables

__all__ = [
    "KEY_ID_VARIABLE",
    "KEY_PASSWORD_VARIABLE",
    "KEY_VARIABLE",
    "SigningCredential",
    "missing_signing_variables",
]

KEY_ID_VARIABLE = "GPG_SIGNING_KEY_ID"
KEY_VARIABLE = "GPG_SIGNING_KEY"
KEY_PASSWORD_VARIABLE = "GPG_SIGNING_KEY_PASSWORD"

_VARIABLES = (KEY_ID_VARIABLE, KEY_VARIABLE, KEY_PASSWORD_VARIABLE)


@dataclass(frozen=True, slots=True)
class SigningCredential:
    key_id: str
    key: str = field(repr=False)
    passphrase: str = field(repr=False)

    @classmethod
    def from_env(cls, env: EnvironmentVariables) -> SigningCredential | None:
        """Read the credential; None unless all three variables are set."""
        key_id = env.get(KEY_ID_VARIABLE)
        key = env.get(KEY_VARIABLE)
        passphrase = env.get(KEY_PASSWORD_VARIABLE)
        if key_id is None or key is None or passphrase is None:
            return None
        return cls(key_id=key_id, key=key, passphrase=passphrase)


def missing_signing_variables(env: EnvironmentVariables) -> list[str]:
    return [name for name in _VARIABLES if not env.is_present(name)]
