"""Test configuration for aab2apk."""

import io
import stat
import sys
import tempfile
import zipfile
from pathlib import Path

import pytest
import structlog

from aab2apk.core.config import get_config

STEP_ENV_VARS = (
    "aab_path",
    "keystore_path",
    "keystore_password",
    "keystore_alias",
    "private_key_password",
    "bundletool_version",
    "bundletool_path",
    "java_path",
    "BITRISE_DEPLOY_DIR",
    "AAB2APK_DOWNLOAD_TIMEOUT",
    "AAB2APK_LOG_LEVEL",
)

# Stands in for `java -jar bundletool.jar build-apks ...`. Records its argv and
# writes an APK set holding universal.apk to --output.
FAKE_JAVA = '''#!{python}
import json
import sys
import zipfile
from pathlib import Path

argv = sys.argv[1:]
with open(r"{record}", "a") as f:
    f.write(json.dumps(argv) + "\\n")

args = argv[3:]
bundle = Path(args[args.index("--bundle") + 1])
output = Path(args[args.index("--output") + 1])
if not bundle.is_file():
    print("Error: bundle file not found: " + str(bundle))
    sys.exit(1)
with zipfile.ZipFile(output, "w") as zf:
    zf.writestr("toc.pb", b"toc")
    zf.writestr("universal.apk", b"universal-apk-from-" + bundle.name.encode())
print("APK set written")
'''

# Stands in for `unzip <archive> -d <dest>`.
FAKE_UNZIP = '''#!{python}
import sys
import zipfile

archive, dest = sys.argv[1], sys.argv[3]
try:
    with zipfile.ZipFile(archive) as zf:
        zf.extractall(dest)
except (OSError, zipfile.BadZipFile) as e:
    print("unzip: cannot open " + archive + ": " + str(e))
    sys.exit(9)
'''


# Stands in for envman. Records argv and stdin, exits with a fixed status.
FAKE_ENVMAN = '''#!{python}
import json
import sys

with open(r"{record}", "a") as f:
    f.write(json.dumps({"argv": sys.argv[1:], "stdin": sys.stdin.read()}) + "\\n")
if {status}:
    print("envman: failed to add env")
sys.exit({status})
'''


def _write_script(path: Path, source: str) -> Path:
    path.write_text(source)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove step inputs inherited from the surrounding environment."""
    for name in STEP_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_step_state():
    """Drop logging configuration and cached config left by a test."""
    yield
    structlog.reset_defaults()
    get_config.cache_clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_aab_bytes():
    """Create minimal AAB-like bytes for testing.

    Returns:
        bytes: A ZIP archive with the basic layout of an app bundle.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("BundleConfig.pb", b"\x0a\x05\x31\x2e\x31\x35")
        zf.writestr("base/manifest/AndroidManifest.xml", b"<manifest/>")
        zf.writestr("base/dex/classes.dex", b"dex\n035\x00")
    return buffer.getvalue()


@pytest.fixture
def sample_aab(temp_dir, sample_aab_bytes):
    """Create ``app-release.aab`` inside the temporary directory."""
    aab_path = temp_dir / "app-release.aab"
    aab_path.write_bytes(sample_aab_bytes)
    return aab_path


@pytest.fixture
def java_calls(temp_dir):
    """File where the fake java runtime records its argument vectors."""
    return temp_dir / "java_calls.jsonl"


@pytest.fixture
def fake_java(temp_dir, java_calls):
    """Executable standing in for the java runtime running bundletool."""
    source = FAKE_JAVA.replace("{python}", sys.executable).replace("{record}", str(java_calls))
    return _write_script(temp_dir / "fake-java", source)


@pytest.fixture
def fake_unzip(temp_dir):
    """Executable standing in for unzip."""
    return _write_script(temp_dir / "fake-unzip", FAKE_UNZIP.replace("{python}", sys.executable))


@pytest.fixture
def bundletool_jar(temp_dir):
    """A local (dummy) bundletool jar."""
    jar = temp_dir / "bundletool-all.jar"
    jar.write_bytes(b"PK\x03\x04 not really a jar")
    return jar



@pytest.fixture
def envman_calls(temp_dir):
    """File where the fake envman records its invocations."""
    return temp_dir / "envman_calls.jsonl"


def _fake_envman(temp_dir, envman_calls, status):
    source = (
        FAKE_ENVMAN.replace("{python}", sys.executable)
        .replace("{record}", str(envman_calls))
        .replace("{status}", str(status))
    )
    return _write_script(temp_dir / f"fake-envman-{status}", source)


@pytest.fixture
def fake_envman(temp_dir, envman_calls):
    """Executable standing in for envman."""
    return _fake_envman(temp_dir, envman_calls, 0)


@pytest.fixture
def failing_envman(temp_dir, envman_calls):
    """envman stand-in exiting with status 1."""
    return _fake_envman(temp_dir, envman_calls, 1)
