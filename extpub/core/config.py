"""Typed publishing settings.

The policy values that the publishing plugins stamp onto every build live
here as frozen dataclasses. They can be overridden from the ``[publishing]``
table of a TOML file:

    [publishing]
    default_description = "Acme open source project"
    staging_timeout_minutes = 30
    override_branches = ["bot/publishing-upgrade"]

    [publishing.license]
    name = "MIT License"
    url = "https://opensource.org/licenses/MIT"

    [publishing.developer]
    id = "acme"
    name = "Acme Inc"
    organization_url = "https://acme.example"
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_str_list, get_table

__all__ = [
    "ConfigError",
    "DeveloperConfig",
    "LicenseConfig",
    "PublishSettings",
    "load_settings",
    "DEFAULT_DESCRIPTION",
    "OVERRIDE_BRANCH_NAMES",
    "STAGING_TIMEOUT_MINUTES",
]

DEFAULT_DESCRIPTION = "Palantir open source project"

# Closing a staging repository has been observed to take 20 minutes, even for a single artifact.
STAGING_TIMEOUT_MINUTES = 25

# Automated upgrade branches that must exercise the remote publish path during `check`.
OVERRIDE_BRANCH_NAMES = frozenset(
    {
        "roomba/external-publish-plugin-migration",
        "roomba/latest-oss-publishing",
    }
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when settings cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class LicenseConfig:
    name: str = "The Apache License, Version 2.0"
    url: str = "https://www.apache.org/licenses/LICENSE-2.0"


@dataclass(frozen=True, slots=True)
class DeveloperConfig:
    id: str = "palantir"
    name: str = "Palantir Technologies Inc"
    organization_url: str = "https://www.palantir.com"


@dataclass(frozen=True, slots=True)
class PublishSettings:
    """Settings shared by the root coordinator and every project gate."""

    default_description: str = DEFAULT_DESCRIPTION
    license: LicenseConfig = field(default_factory=LicenseConfig)
    developer: DeveloperConfig = field(default_factory=DeveloperConfig)
    staging_timeout_minutes: int = STAGING_TIMEOUT_MINUTES
    override_branches: frozenset[str] = OVERRIDE_BRANCH_NAMES

    def __post_init__(self) -> None:
        if self.staging_timeout_minutes <= 0:
            raise ValueError(
                f"staging_timeout_minutes must be positive: {self.staging_timeout_minutes}"
            )

    @property
    def staging_timeout(self) -> timedelta:
        return timedelta(minutes=self.staging_timeout_minutes)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> PublishSettings:
        """Create settings from the ``[publishing]`` table of a parsed TOML file.

        Missing keys keep their defaults. A key that is present with a value of
        the wrong type raises ``ValueError``.
        """
        license_table = _table(data, "license")
        developer_table = _table(data, "developer")
        branches = _value(data, "override_branches", get_str_list, "a list of non-empty strings")
        timeout = _value(data, "staging_timeout_minutes", get_int, "an integer")

        default_license = LicenseConfig()
        default_developer = DeveloperConfig()

        return cls(
            default_description=_string(data, "default_description") or DEFAULT_DESCRIPTION,
            license=LicenseConfig(
                name=_string(license_table, "name") or default_license.name,
                url=_string(license_table, "url") or default_license.url,
            ),
            developer=DeveloperConfig(
                id=_string(developer_table, "id") or default_developer.id,
                name=_string(developer_table, "name") or default_developer.name,
                organization_url=_string(developer_table, "organization_url")
                or default_developer.organization_url,
            ),
            staging_timeout_minutes=timeout if timeout is not None else STAGING_TIMEOUT_MINUTES,
            override_branches=frozenset(branches)
            if branches is not None
            else OVERRIDE_BRANCH_NAMES,
        )


def _value[T](
    table: Mapping[str, object],
    key: str,
    getter: Callable[[Mapping[str, object], str], T | None],
    expected: str,
) -> T | None:
    if key not in table:
        return None
    value = getter(table, key)
    if value is None:
        raise ValueError(f"'{key}' must be {expected}: {table[key]!r}")
    return value


def _string(table: Mapping[str, object], key: str) -> str | None:
    return _value(table, key, get_str, "a non-empty string")


def _table(table: Mapping[str, object], key: str) -> StrDict:
    return _value(table, key, get_table, "a table") or {}


def parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("TOML root must be a table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"File not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading file: {e}", path=path))


def settings_from_table(
    data: Mapping[str, object], path: Path | None = None
) -> Result[PublishSettings, ConfigError]:
    """Build settings from a parsed document that may carry a ``[publishing]`` table."""
    table = get_table(data, "publishing")
    if table is None:
        if "publishing" in data:
            return Err(ConfigError("[publishing] must be a table", path=path))
        return Ok(PublishSettings())

    try:
        return Ok(PublishSettings.from_dict(table))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid [publishing] table: {e}", path=path))


def load_settings(path: Path) -> Result[PublishSettings, ConfigError]:
    """Load publishing settings from a TOML file.

    A file without a ``[publishing]`` table yields the default settings.
    """
    result = parse_toml(path)
    if isinstance(result, Err):
        return result
    return settings_from_table(result.value, path)
