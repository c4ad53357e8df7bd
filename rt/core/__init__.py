"""Core types: results, exit codes, configuration."""

from .config import CONFIG_FILENAME, ConfigError, PlanConfig, ReleaseConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "CONFIG_FILENAME",
    "ConfigError",
    "PlanConfig",
    "ReleaseConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
