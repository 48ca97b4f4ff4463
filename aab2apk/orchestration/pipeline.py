"""
Pipeline orchestration for the export step.

Resolves bundletool, runs the universal APK export and reports the stages it
went through. Every temporary directory the run creates is removed before it
returns, except the one holding the exported APK.
"""

from __future__ import annotations

import tempfile
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path

import httpx

from ..core.config import StepConfig
from ..core.logging import bind_context, clear_context, get_logger
from ..core.types import ExportResult, StageResult
from ..services.exporter import UniversalAPKExporter
from ..tools.bundletool import Bundletool, BundletoolLocator

logger = get_logger(__name__)


@contextmanager
def _stage(name: str, stages: list[StageResult]) -> Iterator[StageResult]:
    stage = StageResult(stage_name=name)
    stages.append(stage)
    logger.info(f"Stage: {name}")
    try:
        yield stage
    except Exception as e:
        stage.mark_failed(str(e))
        logger.error("Stage failed", stage=name, error=str(e))
        raise
    stage.mark_completed()


def run_export(
    config: StepConfig,
    client: httpx.Client | None = None,
    exporter_factory: Callable[[Bundletool], UniversalAPKExporter] = UniversalAPKExporter,
) -> ExportResult:
    """Export the universal APK described by a step configuration.

    Args:
        config: Validated step configuration
        client: HTTP client for the bundletool download
        exporter_factory: Builds the exporter from the resolved bundletool

    Returns:
        ExportResult with the exported APK path

    Raises:
        Aab2ApkError: On download, bundletool or unzip failures.
        OSError: On filesystem failures.
    """
    run_id = str(uuid.uuid4())[:8]
    bind_context(run_id=run_id)
    start_time = time.perf_counter()
    stages: list[StageResult] = []

    logger.info("Starting universal APK export", aab_path=str(config.aab_path))

    try:
        with ExitStack() as resources:
            with _stage("resolve bundletool", stages):
                if config.bundletool_path is not None:
                    bundletool = Bundletool.from_path(config.bundletool_path, runtime=config.java_path)
                    version = "local"
                else:
                    locator = BundletoolLocator(
                        config.bundletool_version,
                        runtime=config.java_path,
                        client=client,
                        timeout=config.download_timeout_seconds,
                    )
                    tool_dir = resources.enter_context(tempfile.TemporaryDirectory(prefix="tool"))
                    bundletool = locator.resolve(Path(tool_dir))
                    version = config.bundletool_version

            with _stage("export universal apk", stages):
                exporter = exporter_factory(bundletool)
                apk_path = exporter.export(config.aab_path, config.keystore(), config.output_dir)
    finally:
        clear_context()

    return ExportResult(
        apk_path=apk_path,
        aab_path=config.aab_path,
        bundletool_version=version,
        signed=config.signing_enabled,
        stages=stages,
        duration_seconds=time.perf_counter() - start_time,
    )
