# /inspection_capture/error_pages/handlers.py

# Third-party imports
from flask import Blueprint, jsonify, request


# Local imports
from inspection_capture import app, log_message

# blueprint router configuration
error_pages = Blueprint("error_pages", __name__)


@error_pages.app_errorhandler(404)
def error_404(error):
    """Error 404 handler"""
    incoming_url = request.path
    app.logger.error(log_message(f"404 Error: {error}, URL: {incoming_url}"))
    return jsonify({"success": False, "error": "Not found", "path": incoming_url}), 404


@error_pages.app_errorhandler(413)
def error_413(error):
    """Oversized upload (photos exceed MAX_CONTENT_LENGTH)"""
    app.logger.error(log_message(f"413 Error: {error}"))
    return jsonify({"success": False, "error": "Request is too large. Retake the photos at a lower resolution."}), 413


@error_pages.app_errorhandler(500)
def error_500(error):
    """Error 500 handler"""
    app.logger.error(log_message(error))
    return jsonify({"success": False, "error": "Internal server error"}), 500
