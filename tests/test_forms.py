import base64
from datetime import datetime, timezone

import pytest

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture()
def forms(app):
    from inspection_capture.inspection import forms as module

    return module


def test_valid_submission_is_trimmed(forms):
    result = forms.validate_inspection({"productName": " 91958PI010 ", "inspector": " kim ", "notes": "  "})
    assert result.ok
    assert result.value.product_name == "91958PI010"
    assert result.value.inspector == "kim"
    assert result.value.notes is None
    assert result.value.photos == {}


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {"productName": "91958PI010"},
        {"inspector": "kim"},
        {"productName": "x" * 65, "inspector": "kim"},
        {"productName": "91958PI010", "inspector": "kim", "photos": ["front"]},
        {"productName": "91958PI010", "inspector": "kim", "photos": {"top": "AAAA"}},
        {"productName": "91958PI010", "inspector": "kim", "photos": {"front": "not base64!"}},
        {"productName": "91958PI010", "inspector": "kim", "photos": {"front": 42}},
    ],
)
def test_invalid_submissions(forms, payload):
    result = forms.validate_inspection(payload)
    assert not result.ok
    assert result.error


def test_photo_data_url_sets_content_type(forms):
    from inspection_capture.models import PhotoDirection

    raw = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")
    photo = forms.decode_photo(PhotoDirection.back, raw)
    assert photo.content == PNG_BYTES
    assert photo.content_type == "image/png"
    assert photo.extension == "png"


def test_bare_base64_photo_defaults_to_jpeg(forms):
    from inspection_capture.models import PhotoDirection

    photo = forms.decode_photo(PhotoDirection.front, base64.b64encode(b"abc").decode("ascii"))
    assert photo.content_type == "image/jpeg"
    assert photo.extension == "jpg"


def test_local_sink_writes_record_folder(app, forms, tmp_path):
    import json
    import os

    from inspection_capture.inspection.storage import LocalDocumentSink
    from inspection_capture.models import PhotoDirection

    submission = forms.InspectionSubmission(
        product_name="91958/CU810",
        inspector="kim",
        notes="ok",
        photos={PhotoDirection.left: forms.DecodedPhoto(PhotoDirection.left, PNG_BYTES, "image/png")},
    )
    submitted_at = datetime(2024, 10, 17, 8, 30, 15, 123000, tzinfo=timezone.utc)

    stored = LocalDocumentSink(str(tmp_path), "Archive").store(submission, submitted_at)

    assert stored.folder_path == str(tmp_path / "Archive" / "91958_CU810_2024-10-17T08-30-15-123000+00-00")
    with open(os.path.join(stored.folder_path, stored.json_file), encoding="utf-8") as f:
        record = json.load(f)
    assert record["productName"] == "91958/CU810"
    assert record["timestamp"] == "2024-10-17T08:30:15.123000+00:00"
    assert list(stored.photos) == ["left"]
    assert stored.photos["left"].endswith("left.png")
