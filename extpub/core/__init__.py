"""Core types shared by the build model, the publishing policy and the CLI."""

from .config import ConfigError, PublishSettings, load_settings
from .env import EnvironmentVariables
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "ConfigError",
    "PublishSettings",
    "load_settings",
    # env
    "EnvironmentVariables",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
