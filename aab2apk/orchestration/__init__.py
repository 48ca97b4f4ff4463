"""Pipeline orchestration for aab2apk."""

from .pipeline import run_export

__all__ = ["run_export"]
