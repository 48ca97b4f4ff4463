"""
Universal APK Export Service.

Turns an Android App Bundle into a single installable universal APK: builds the
universal APK set, extracts ``universal.apk`` from it and renames the result
after the input bundle.
"""

from __future__ import annotations

import shutil
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from ...core.exceptions import ExportError
from ...core.logging import get_logger
from ...tools.command import Command

if TYPE_CHECKING:
    from ...core.config import KeystoreConfig

logger = get_logger(__name__)

UNIVERSAL_APK_MEMBER = "universal.apk"
UNIVERSAL_APK_SUFFIX = "-universal.apk"


def universal_apk_name(aab_path: Path | str) -> str:
    """File name of the universal APK exported from an AAB.

    ``build/app-release.aab`` becomes ``app-release-universal.apk``. A bundle
    without an extension keeps its full base name.
    """
    return Path(aab_path).stem + UNIVERSAL_APK_SUFFIX


class APKBuilder(ABC):
    """Something that can build a universal APK set from an AAB."""

    @abstractmethod
    def build_apks(self, aab_path: Path, keystore: KeystoreConfig | None, output_dir: Path) -> Path:
        """Build ``universal.apks`` from an AAB into ``output_dir``.

        Args:
            aab_path: Input Android App Bundle
            keystore: Signing parameters, None for an unsigned build
            output_dir: Directory receiving the archive

        Returns:
            Path to the produced archive
        """
        ...


class UniversalAPKExporter:
    """Service exporting a universal APK from an AAB.

    This service:
    1. Builds the universal APK set with the configured builder
    2. Unzips the APK set in the same scratch directory
    3. Moves ``universal.apk`` to the output directory under the bundle's name

    The scratch directory is removed when the export finishes, whether it
    succeeded or not.
    """

    def __init__(self, builder: APKBuilder, unzip: str = "unzip") -> None:
        """Initialize the exporter.

        Args:
            builder: Builds the universal APK set (bundletool in production)
            unzip: unzip executable
        """
        self.builder = builder
        self.unzip = unzip

    def _unzip_universal_apks(self, archive: Path, dest_dir: Path) -> Path:
        """Unzip a universal APK set and return the extracted APK.

        Raises:
            CommandError: If unzip fails.
            ExportError: If the archive holds no ``universal.apk``.
        """
        Command.new(self.unzip, str(archive), "-d", str(dest_dir)).run()

        universal_apk = dest_dir / UNIVERSAL_APK_MEMBER
        if not universal_apk.is_file():
            raise ExportError(
                message=f"{archive.name} does not contain {UNIVERSAL_APK_MEMBER}",
                context={"archive": str(archive)},
            )
        return universal_apk

    def export(
        self,
        aab_path: Path,
        keystore: KeystoreConfig | None = None,
        output_dir: Path | None = None,
    ) -> Path:
        """Export the universal APK of an AAB.

        Args:
            aab_path: Input Android App Bundle. Not checked here, a missing
                bundle surfaces as a bundletool failure.
            keystore: Signing parameters, None for an unsigned build
            output_dir: Directory receiving the APK. A new temporary directory
                is created when omitted.

        Returns:
            Path to the renamed universal APK

        Raises:
            CommandError: If bundletool or unzip fails.
            ExportError: If the APK set holds no universal APK.
            OSError: On filesystem failures.
        """
        start_time = time.perf_counter()
        logger.info("Exporting universal APK", aab_path=str(aab_path), signed=keystore is not None)

        with tempfile.TemporaryDirectory(prefix="aab-bundle") as scratch:
            work_dir = Path(scratch)
            apks_path = self.builder.build_apks(aab_path, keystore, work_dir)
            universal_apk = self._unzip_universal_apks(apks_path, work_dir)

            renamed = work_dir / universal_apk_name(aab_path)
            universal_apk.rename(renamed)

            target_dir = self._output_dir(output_dir)
            apk_path = target_dir / renamed.name
            shutil.move(str(renamed), str(apk_path))

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info("Universal APK exported", apk_path=str(apk_path), duration_ms=duration_ms)
        return apk_path

    @staticmethod
    def _output_dir(output_dir: Path | None) -> Path:
        if output_dir is None:
            return Path(tempfile.mkdtemp(prefix="universal-apk"))
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir
