# config.py
"""Inspection Capture - Flask Application configuration."""

# Python imports
from os import environ, path

# Third-party imports
from dotenv import load_dotenv

# Local imports

# Load environment variables from .env file
basedir = path.abspath(path.dirname(__file__))
load_dotenv(path.join(basedir, ".env"))


def _env_flag(name, default):
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Base config."""

    SECRET_KEY = environ.get("SECRET_KEY")

    # Default persistence location for local dev.
    # Docker sets INSPECTION_DATA_FOLDER=/data explicitly, so these defaults won't interfere.
    INSPECTION_DATA_FOLDER = environ.get("INSPECTION_DATA_FOLDER") or path.join(basedir, "inspection_data")
    INSPECTION_DB_FILE_NAME = environ.get("INSPECTION_DB_FILE_NAME") or "inspection_capture.sqlite"
    INSPECTION_LOG_FILE = (
        environ.get("INSPECTION_LOG_FILE")
        or path.join(INSPECTION_DATA_FOLDER, "inspection_capture.log")
    )

    # Local document archive (record JSON + photos per inspection)
    DOCUMENT_ARCHIVE_ENABLED = _env_flag("DOCUMENT_ARCHIVE_ENABLED", True)
    DOCUMENT_STORAGE_PATH = environ.get("DOCUMENT_STORAGE_PATH") or INSPECTION_DATA_FOLDER
    DOCUMENT_FOLDER_NAME = environ.get("DOCUMENT_FOLDER_NAME") or "InspectionData"

    # Four base64 photos per submission
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024

    APP_SERVER_OS = environ.get("APP_SERVER_OS") or "Linux"


class ProdConfig(Config):
    """Production System Configuration"""

    FLASK_ENV = "production"
    DEBUG = False
    TESTING = False
    LOG_LINES_TO_SHOW = "164"


class DevConfig(Config):
    """Development System Configuration"""

    FLASK_ENV = "development"
    DEBUG = True
    TESTING = True
    LOG_LINES_TO_SHOW = "164"
