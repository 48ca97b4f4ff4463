"""Services package for aab2apk."""

from .exporter import UniversalAPKExporter

__all__ = [
    "UniversalAPKExporter",
]
