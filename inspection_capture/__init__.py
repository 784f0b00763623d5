# /__init__.py

# Python Imports
import os
from datetime import datetime, timezone
import logging
import subprocess
import toml

# Third party imports
from flask import Flask, Response, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from pathlib import Path
from dotenv import load_dotenv

# Local imports

# Define the WSGI application object
app = Flask(__name__)

##################################
### Load Flask Run Mode
### Configuration based
### on environment
### (Production, Development)
##################################
load_dotenv("./.env", verbose=True)
app.config.from_object(os.environ["APP_MODE"])


##################################
### Logging Setup
##################################
os.makedirs(app.config["INSPECTION_DATA_FOLDER"], exist_ok=True)
os.makedirs(os.path.dirname(app.config["INSPECTION_LOG_FILE"]) or ".", exist_ok=True)
logging.basicConfig(
    filename=app.config["INSPECTION_LOG_FILE"],
    level=logging.INFO,
    format="%(asctime)s %(levelname)s : %(message)s",
)


def log_message(message):
    """Helper function to prefix Log message with the source IP address"""
    source_ip = (
        request.headers.get("X-Forwarded-For", request.remote_addr or "")
        .split(",")[0]
        .strip()
    )
    return f"[IP: {source_ip}] {message}"


@app.route("/get-log")
def get_log():
    """Get the last x lines of the application log file."""
    app.logger.debug(log_message("Processing /get-log route..."))
    log_file_path = app.config["INSPECTION_LOG_FILE"]
    lines_to_show = app.config["LOG_LINES_TO_SHOW"]
    if not os.path.exists(log_file_path):
        return jsonify({"error": "Log file not found"}), 404

    # use subprocess to call the system's tail command
    try:
        if app.config["APP_SERVER_OS"] == "Windows":
            result = subprocess.run(
                ["powershell", "Get-Content", log_file_path, "-Tail", lines_to_show],
                stdout=subprocess.PIPE,
            )
        else:
            result = subprocess.run(
                ["tail", "-n", lines_to_show, log_file_path], stdout=subprocess.PIPE
            )
        log_content = result.stdout.decode("utf-8")
    except Exception as e:
        app.logger.error(log_message(f"Error reading log file: {e}"))
        return jsonify({"error": "Error reading log file"}), 500

    return Response(log_content, mimetype="text/plain")


##################################
### Database Setup
##################################
app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + os.path.join(
    app.config["INSPECTION_DATA_FOLDER"], app.config["INSPECTION_DB_FILE_NAME"]
)
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

app.logger.info(f"Inspection Capture Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}")

db = SQLAlchemy(app)

# Initialize schema (idempotent) so local persistence works out of the box.
with app.app_context():
    import inspection_capture.models  # noqa: F401

    db.create_all()


##################################
### Routing Blueprint Setup
##################################
from inspection_capture.error_pages.handlers import error_pages
from inspection_capture.inspection.views import inspection
from inspection_capture.scan.views import scan


app.register_blueprint(error_pages)
app.register_blueprint(scan)
app.register_blueprint(inspection)


##################################
### Health
##################################
_PYPROJECT = Path(__file__).resolve().parents[1] / "pyproject.toml"


def get_version():
    """Get the version of the application."""
    try:
        with open(_PYPROJECT, "r") as f:
            pyproject_data = toml.load(f)
    except OSError:
        return "unknown"
    return pyproject_data["project"]["version"]


@app.route("/api/health")
def health():
    """Liveness probe for the inspection API."""
    return jsonify(
        {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": get_version(),
        }
    )
