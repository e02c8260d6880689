"""Core domain types: config, context, errors, results."""

from .config import Config, ConfigError, load_config
from .context import Artifact, ExecutionContext, GitInfo, resolve_prerelease
from .errors import ErrorCode, ReleaseError
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    # context
    "Artifact",
    "ExecutionContext",
    "GitInfo",
    "resolve_prerelease",
    # errors
    "ErrorCode",
    "ReleaseError",
    # result
    "Err",
    "Ok",
    "Result",
]
