"""
bundletool resolution and invocation.

Downloads the bundletool jar for a release (trying the versioned asset name
first, then the generic one) and builds ``java -jar bundletool.jar ...``
commands from the resulting handle.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

import httpx

from ..core.config import KeystoreConfig
from ..core.exceptions import DownloadError, NoSourceAvailableError, ToolNotFoundError
from ..core.logging import get_logger
from ..services.exporter.service import APKBuilder
from .command import Command

logger = get_logger(__name__)

RELEASES_URL = "https://github.com/google/bundletool/releases/download"
TOOL_FILE_NAME = "bundletool-all.jar"
APKS_FILE_NAME = "universal.apks"


def bundletool_urls(version: str, base_url: str = RELEASES_URL) -> list[str]:
    """Candidate download URLs for a bundletool release, in priority order."""
    return [
        f"{base_url}/{version}/bundletool-all-{version}.jar",
        f"{base_url}/{version}/bundletool-all.jar",
    ]


def build_apks_args(aab_path: Path | str, output_path: Path | str, keystore: KeystoreConfig | None = None) -> list[str]:
    """Arguments for ``bundletool build-apks`` producing a universal APK set."""
    args = ["--mode=universal", "--bundle", str(aab_path), "--output", str(output_path)]
    if keystore is not None:
        args += ["--ks", str(keystore.path)]
        args += ["--ks-pass", keystore.keystore_password.get_secret_value()]
        args += ["--ks-key-alias", keystore.signing_key_alias]
        args += ["--key-pass", keystore.signing_key_password.get_secret_value()]
    return args


@dataclass(frozen=True)
class Bundletool(APKBuilder):
    """Handle to a local bundletool jar."""

    path: Path
    runtime: str = "java"

    @classmethod
    def from_path(cls, path: Path, runtime: str = "java") -> Bundletool:
        """Wrap an already downloaded jar.

        Raises:
            ToolNotFoundError: If the jar does not exist.
        """
        if not path.is_file():
            raise ToolNotFoundError(
                message="bundletool jar not found",
                tool_name="bundletool",
                expected_path=str(path),
                install_hint="leave bundletool_path empty to download a release",
            )
        logger.info("Using local bundletool", path=str(path))
        return cls(path=path, runtime=runtime)

    def build_command(self, subcommand: str, *args: str, sensitive: tuple[str, ...] = ()) -> Command:
        """Command running a bundletool subcommand with the given arguments."""
        return Command.new(self.runtime, "-jar", str(self.path), subcommand, *args, sensitive=sensitive)

    def build_apks(self, aab_path: Path, keystore: KeystoreConfig | None, output_dir: Path) -> Path:
        """Build a universal APK set from an AAB into ``output_dir``.

        Returns:
            Path to the produced ``universal.apks`` archive.

        Raises:
            CommandError: If bundletool fails.
        """
        output_path = output_dir / APKS_FILE_NAME
        sensitive: tuple[str, ...] = ()
        if keystore is not None:
            sensitive = (
                keystore.keystore_password.get_secret_value(),
                keystore.signing_key_password.get_secret_value(),
            )

        command = self.build_command("build-apks", *build_apks_args(aab_path, output_path, keystore), sensitive=sensitive)
        logger.info("Building universal APK set", command=command.printable)
        command.run()
        return output_path


class BundletoolLocator:
    """Resolves a bundletool release to a local jar.

    Each candidate URL is tried in order. A non-200 answer moves on to the next
    candidate, a transport error aborts immediately.
    """

    def __init__(
        self,
        version: str,
        runtime: str = "java",
        client: httpx.Client | None = None,
        base_url: str = RELEASES_URL,
        timeout: float = 60.0,
    ) -> None:
        """Initialize the locator.

        Args:
            version: bundletool release tag, e.g. ``0.15.0``
            runtime: Java executable used to run the jar
            client: HTTP client to use; one is created per resolve otherwise
            base_url: Releases download root
            timeout: HTTP timeout per operation when creating a client
        """
        self.version = version
        self.runtime = runtime
        self.client = client
        self.base_url = base_url
        self.timeout = timeout

    @property
    def sources(self) -> list[str]:
        return bundletool_urls(self.version, self.base_url)

    def resolve(self, dest_dir: Path | None = None) -> Bundletool:
        """Download the jar and return a handle to it.

        Args:
            dest_dir: Directory receiving the jar. A new temporary directory is
                created when omitted.

        Raises:
            DownloadError: On a transport failure.
            NoSourceAvailableError: If no candidate answered 200 OK.
        """
        if self.client is not None:
            return self._download(self.client, dest_dir)
        with httpx.Client(timeout=self.timeout) as client:
            return self._download(client, dest_dir)

    def _download(self, client: httpx.Client, dest_dir: Path | None) -> Bundletool:
        for source in self.sources:
            try:
                with client.stream("GET", source, follow_redirects=True) as response:
                    if response.status_code != httpx.codes.OK:
                        logger.debug("bundletool source unavailable", url=source, status=response.status_code)
                        continue
                    logger.info("URL used to download bundletool", url=source)
                    tool_path = self._target_dir(dest_dir) / TOOL_FILE_NAME
                    with open(tool_path, "wb") as f:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise DownloadError(
                    message=f"Failed to download bundletool from {source}",
                    url=source,
                    cause=e,
                ) from e

            logger.info("bundletool path created", path=str(tool_path))
            return Bundletool(path=tool_path, runtime=self.runtime)

        raise NoSourceAvailableError(
            message="none of the sources returned 200 OK status",
            sources=self.sources,
            context={"version": self.version},
        )

    @staticmethod
    def _target_dir(dest_dir: Path | None) -> Path:
        if dest_dir is None:
            return Path(tempfile.mkdtemp(prefix="tool"))
        dest_dir.mkdir(parents=True, exist_ok=True)
        return dest_dir
