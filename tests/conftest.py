import os
import sys
from pathlib import Path

import pytest


# Ensure the project root (repo folder) is importable when running pytest under uv.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# Canonical Data-Matrix label payload (RS=0x1e, GS=0x1d, EOT=0x04).
CANONICAL_PAYLOAD = (
    "[)>\x1e06\x1dVSBH4\x1dP91958CU810PD\x1dSHB81\x1dEJW124052"
    "\x1dT241017KKH1@OX15901W\x1dC020100007000000A2\x1d\x1e\x04"
)
CANONICAL_PRODUCT_NAME = "91958CU810JW007"


def _clear_import_cache(prefix: str) -> None:
    for name in list(sys.modules.keys()):
        if name == prefix or name.startswith(prefix + "."):
            del sys.modules[name]


def _clear_module(name: str) -> None:
    if name in sys.modules:
        del sys.modules[name]


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create a Flask app configured to use a temp folder for DB/logs/archive.

    The application is defined as a global in inspection_capture/__init__.py and
    reads configuration from environment variables at import time.
    """

    data_dir = tmp_path_factory.mktemp("inspection_data")

    os.environ["APP_MODE"] = "config.DevConfig"
    os.environ["SECRET_KEY"] = "test-secret-key"
    os.environ["APP_SERVER_OS"] = "Linux"

    # Force temp persistence so tests never touch the developer's real data.
    os.environ["INSPECTION_DATA_FOLDER"] = str(data_dir)
    os.environ["INSPECTION_DB_FILE_NAME"] = "test.sqlite"
    os.environ["INSPECTION_LOG_FILE"] = str(Path(data_dir) / "test.log")
    os.environ["DOCUMENT_STORAGE_PATH"] = str(Path(data_dir) / "archive")
    os.environ["DOCUMENT_ARCHIVE_ENABLED"] = "true"

    _clear_import_cache("inspection_capture")
    # APP_MODE points at the top-level module "config", so ensure it reloads with our env.
    _clear_module("config")
    _clear_module("app")

    import inspection_capture  # noqa: E402

    return inspection_capture.app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db(app):
    import inspection_capture  # noqa: E402

    with app.app_context():
        yield inspection_capture.db
        inspection_capture.db.session.remove()


@pytest.fixture()
def product_code(app):
    """The product-code module, imported after the app is configured."""
    from inspection_capture.scan import product_code as module

    return module
