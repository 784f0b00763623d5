from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from inspection_capture import db, log_message
from inspection_capture.models import ScanCapture, ScanSource, Symbology
from inspection_capture.scan.product_code import extract_product_code

# blueprint router configuration
scan = Blueprint("scan", __name__, url_prefix="/api/scan")

_RESCAN_MESSAGE = "Could not read a product name from the code. Rescan or enter it manually."


def _request_fields() -> dict:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def _scan_source(value) -> ScanSource:
    source_raw = value.strip().lower() if isinstance(value, str) else ""
    if source_raw in {"wedge", "scanner"}:
        # Wedge scanners emulate keyboard input; we store as 'scanner' in the DB enum.
        return ScanSource.scanner
    if source_raw == "manual":
        return ScanSource.manual
    return ScanSource.camera


@scan.route("/parse", methods=["POST"])
def parse_scan():
    """Turn a decoded barcode payload into a product name for the inspection form."""
    fields = _request_fields()
    raw = fields.get("raw")
    if not isinstance(raw, str):
        raw = ""

    result = extract_product_code(raw)
    if result.ok:
        current_app.logger.info(log_message(f"Parsed {result.symbology} scan: {result.value}"))
    else:
        current_app.logger.warning(log_message(f"Unrecognized scan: {result.error}"))

    scan_id: str | None = None
    try:
        capture = ScanCapture(
            source=_scan_source(fields.get("source")),
            raw_input=raw,
            symbology=Symbology(result.symbology) if result.symbology else Symbology.unknown,
            product_name=result.value,
            matched=result.ok,
            error=result.error,
        )
        db.session.add(capture)
        db.session.commit()
        scan_id = capture.id
    except Exception:
        # The operator still gets the parsed value even if the audit row is lost.
        db.session.rollback()
        current_app.logger.exception("Failed to persist scan")

    if not result.ok:
        return jsonify({"ok": False, "error": _RESCAN_MESSAGE, "scanId": scan_id}), 200

    return (
        jsonify(
            {
                "ok": True,
                "productName": result.value,
                "symbology": result.symbology,
                "scanId": scan_id,
            }
        ),
        200,
    )
