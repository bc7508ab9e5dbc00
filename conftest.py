import sys
from pathlib import Path

import pytest

# Fail fast if Python version is unsupported
if sys.version_info < (3, 9):
    print(
        f"ERROR: This project requires Python 3.9+ (found {sys.version.split()[0]}).",
        file=sys.stderr,
    )
    sys.exit(1)


# Make 'src' importable without an editable install.
ROOT_DIR = Path(__file__).parent.absolute()
src_dir = ROOT_DIR / "src"

if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def _clear_sqlcomment_env(monkeypatch):
    """Keep SQLCOMMENT_* settings from the host environment out of tests."""
    for name in (
        "SQLCOMMENT_ENABLED",
        "SQLCOMMENT_APPLICATION",
        "SQLCOMMENT_FRAMEWORK",
        "SQLCOMMENT_TAGS",
        "SQLCOMMENT_DRIVER_VERSION",
        "SQLCOMMENT_TRACE",
    ):
        monkeypatch.delenv(name, raising=False)
