"""
aab2apk: Export a universal APK from an Android App Bundle.

CI build step that downloads bundletool, builds a universal APK set from an
AAB, extracts the universal APK and publishes its path to later steps.
"""

__version__ = "1.0.0"
__author__ = "aab2apk Team"
