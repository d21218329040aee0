"""Core types shared by every layer."""

from .config import CONFIG_FILE_NAME, Config, ConfigError, ReleaseConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "CONFIG_FILE_NAME",
    "Config",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
