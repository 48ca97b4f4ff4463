"""
Configuration management for aab2apk.

Step inputs arrive as environment variables (the CI exposes every step input
that way) and can be overridden from the command line. Validation happens
here, before any pipeline work starts.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()

DEFAULT_BUNDLETOOL_VERSION = "0.15.0"
APKS_PATH_ENV_KEY = "APKS_PATH"

# Prefixes bundletool understands for --ks-pass and --key-pass.
_PASSWORD_PREFIXES = ("pass:", "file:")

_KEYSTORE_FIELDS = ("keystore_path", "keystore_password", "keystore_alias", "private_key_password")


class KeystoreConfig(BaseModel):
    """Signing parameters forwarded to ``bundletool build-apks``."""

    path: Path = Field(description="Keystore file path")
    keystore_password: SecretStr = Field(description="Keystore password")
    signing_key_alias: str = Field(description="Alias of the signing key")
    signing_key_password: SecretStr = Field(description="Signing key password")

    model_config = {"frozen": True}


def _bundletool_password(value: str) -> str:
    if value.startswith(_PASSWORD_PREFIXES):
        return value
    return f"pass:{value}"


class StepConfig(BaseModel):
    """Root configuration for the export step."""

    aab_path: Path = Field(description="Path to the input Android App Bundle")

    # Signing, all or nothing
    keystore_path: Path | None = Field(default=None, description="Keystore file path")
    keystore_password: SecretStr | None = Field(default=None, description="Keystore password")
    keystore_alias: str | None = Field(default=None, description="Signing key alias")
    private_key_password: SecretStr | None = Field(default=None, description="Signing key password")

    bundletool_version: str = Field(
        default=DEFAULT_BUNDLETOOL_VERSION, min_length=1, description="bundletool release to download"
    )
    bundletool_path: Path | None = Field(
        default=None, description="Pre-downloaded bundletool jar, skips the download"
    )
    java_path: str = Field(default="java", min_length=1, description="Java runtime used to run bundletool")
    output_dir: Path | None = Field(default=None, description="Directory receiving the universal APK")
    download_timeout_seconds: float = Field(default=60.0, gt=0, description="HTTP timeout per operation")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )

    model_config = {"extra": "ignore"}

    @field_validator("aab_path")
    @classmethod
    def _aab_must_exist(cls, value: Path) -> Path:
        if not value.is_file():
            raise ValueError(f"AAB file does not exist: {value}")
        return value

    @model_validator(mode="after")
    def _keystore_all_or_nothing(self) -> StepConfig:
        provided = [name for name in _KEYSTORE_FIELDS if _is_set(getattr(self, name))]
        if provided and len(provided) != len(_KEYSTORE_FIELDS):
            missing = [name for name in _KEYSTORE_FIELDS if name not in provided]
            raise ValueError(
                "Keystore signing parameters must be provided together, missing: " + ", ".join(missing)
            )
        return self

    @property
    def signing_enabled(self) -> bool:
        """Whether the build is signed with the configured keystore."""
        return self.keystore_path is not None

    def keystore(self) -> KeystoreConfig | None:
        """Build the keystore configuration, or None for an unsigned build."""
        if not self.signing_enabled:
            return None
        # All four are set once signing is enabled
        keystore_password = cast(SecretStr, self.keystore_password)
        private_key_password = cast(SecretStr, self.private_key_password)
        return KeystoreConfig(
            path=self.keystore_path,
            keystore_password=SecretStr(_bundletool_password(keystore_password.get_secret_value())),
            signing_key_alias=self.keystore_alias,
            signing_key_password=SecretStr(_bundletool_password(private_key_password.get_secret_value())),
        )

    @classmethod
    def create(cls, **values: object) -> StepConfig:
        """Validate raw step inputs, dropping empty values.

        Raises:
            ValidationError: If a required input is missing or invalid.
        """
        cleaned = {key: value for key, value in values.items() if _is_set(value)}
        try:
            return cls(**cleaned)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_name = ".".join(str(part) for part in first["loc"]) or None
            raise ValidationError(
                message=first["msg"],
                field_name=field_name,
                context={"errors": e.error_count()},
                cause=e,
            ) from e

    @classmethod
    def from_env(cls, **overrides: object) -> StepConfig:
        """Create configuration from environment variables.

        Keyword overrides win over the environment when they are set.
        """
        values: dict[str, object] = {
            "aab_path": os.environ.get("aab_path", ""),
            "keystore_path": os.environ.get("keystore_path"),
            "keystore_password": os.environ.get("keystore_password"),
            "keystore_alias": os.environ.get("keystore_alias"),
            "private_key_password": os.environ.get("private_key_password"),
            "bundletool_version": os.environ.get("bundletool_version"),
            "bundletool_path": os.environ.get("bundletool_path"),
            "java_path": os.environ.get("java_path"),
            "output_dir": os.environ.get("BITRISE_DEPLOY_DIR"),
            "download_timeout_seconds": os.environ.get("AAB2APK_DOWNLOAD_TIMEOUT"),
            "log_level": os.environ.get("AAB2APK_LOG_LEVEL"),
        }
        values.update({key: value for key, value in overrides.items() if _is_set(value)})
        return cls.create(**values)


def _is_set(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, SecretStr):
        return bool(value.get_secret_value())
    if isinstance(value, str):
        return bool(value.strip())
    return True


@lru_cache(maxsize=1)
def get_config() -> StepConfig:
    """Get cached configuration instance built from the environment."""
    return StepConfig.from_env()
