from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from inspection_capture import db, log_message
from inspection_capture.inspection.forms import validate_inspection
from inspection_capture.inspection.storage import DocumentSink, DocumentStorageError, LocalDocumentSink
from inspection_capture.models import ArchiveStatus, Inspection, InspectionPhoto, ScanCapture, utcnow

# blueprint router configuration
inspection = Blueprint("inspection", __name__, url_prefix="/api/inspection")

#  Global constants
_HISTORY_DEFAULT_LIMIT = 50
_HISTORY_MAX_LIMIT = 200


def get_document_sink() -> DocumentSink:
    """Document store for archived records; tests swap it through app.extensions."""
    sink = current_app.extensions.get("document_sink")
    if sink is None:
        sink = LocalDocumentSink(
            current_app.config["DOCUMENT_STORAGE_PATH"],
            current_app.config["DOCUMENT_FOLDER_NAME"],
        )
        current_app.extensions["document_sink"] = sink
    return sink


def _archive(record: Inspection, submission, submitted_at) -> None:
    if not current_app.config.get("DOCUMENT_ARCHIVE_ENABLED", True):
        record.archive_status = ArchiveStatus.skipped
        return

    try:
        stored = get_document_sink().store(submission, submitted_at)
    except DocumentStorageError as e:
        # The DB row is the source of truth; the archive is a mirror.
        current_app.logger.warning(log_message(f"Archive failed for inspection {record.id}: {e}"))
        record.archive_status = ArchiveStatus.failed
        record.archive_error = str(e)
        return

    record.archive_status = ArchiveStatus.success
    record.archive_path = stored.folder_path
    for photo in record.photos:
        photo.file_path = stored.photos.get(photo.direction.value)


@inspection.route("", methods=["POST"])
def submit_inspection():
    """Persist an inspection record and mirror it to the document store."""
    validation = validate_inspection(request.get_json(silent=True))
    if not validation.ok:
        current_app.logger.info(log_message(f"Rejected inspection: {validation.error}"))
        return jsonify({"success": False, "error": validation.error}), 400

    submission = validation.value
    scan_id = submission.scan_id
    if scan_id and db.session.get(ScanCapture, scan_id) is None:
        scan_id = None

    submitted_at = utcnow()
    try:
        record = Inspection(
            product_name=submission.product_name,
            inspector=submission.inspector,
            notes=submission.notes,
            scan_id=scan_id,
            created_at=submitted_at,
        )
        for direction, photo in submission.photos.items():
            record.photos.append(
                InspectionPhoto(
                    direction=direction,
                    content_type=photo.content_type,
                    size_bytes=len(photo.content),
                )
            )
        db.session.add(record)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to persist inspection")
        return jsonify({"success": False, "error": "Failed to save the inspection."}), 500

    _archive(record, submission, submitted_at)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to record archive status")

    current_app.logger.info(
        log_message(
            f"Saved inspection {record.id} for {record.product_name} "
            f"({len(submission.photos)} photo(s), archive {record.archive_status.value})"
        )
    )

    data = record.to_dict()
    data["archive"]["photos"] = {photo.direction.value: photo.file_path for photo in record.photos if photo.file_path}
    return jsonify({"success": True, "message": "Inspection saved.", "data": data}), 200


@inspection.route("/history", methods=["GET"])
def inspection_history():
    limit_arg = request.args.get("limit")
    limit = int(limit_arg) if limit_arg and limit_arg.isdigit() else _HISTORY_DEFAULT_LIMIT
    limit = max(1, min(limit, _HISTORY_MAX_LIMIT))

    query = db.select(Inspection).order_by(Inspection.created_at.desc()).limit(limit)
    inspector_filter = (request.args.get("inspector") or "").strip()
    if inspector_filter:
        query = query.where(Inspection.inspector == inspector_filter)

    records = db.session.execute(query).scalars().all()
    return jsonify({"success": True, "data": [record.to_dict() for record in records]}), 200


@inspection.route("/<inspection_id>", methods=["GET"])
def inspection_detail(inspection_id: str):
    record = db.session.get(Inspection, inspection_id)
    if record is None:
        return jsonify({"success": False, "error": "Inspection not found."}), 404
    return jsonify({"success": True, "data": record.to_dict(with_photos=True)}), 200
