"""Universal APK export service."""

from .service import APKBuilder, UniversalAPKExporter, universal_apk_name

__all__ = ["APKBuilder", "UniversalAPKExporter", "universal_apk_name"]
