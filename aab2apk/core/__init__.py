"""Core infrastructure components for aab2apk."""

from .config import APKS_PATH_ENV_KEY, DEFAULT_BUNDLETOOL_VERSION, KeystoreConfig, StepConfig, get_config
from .exceptions import (
    Aab2ApkError,
    CommandError,
    DownloadError,
    ExportError,
    NoSourceAvailableError,
    ToolNotFoundError,
    ValidationError,
)
from .logging import get_logger, setup_logging
from .types import ExportResult, StageResult, StageStatus

__all__ = [
    "APKS_PATH_ENV_KEY",
    "DEFAULT_BUNDLETOOL_VERSION",
    "KeystoreConfig",
    "StepConfig",
    "get_config",
    "Aab2ApkError",
    "CommandError",
    "DownloadError",
    "ExportError",
    "NoSourceAvailableError",
    "ToolNotFoundError",
    "ValidationError",
    "get_logger",
    "setup_logging",
    "ExportResult",
    "StageResult",
    "StageStatus",
]
