from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from inspection_capture.inspection.forms import DecodedPhoto, InspectionSubmission
from inspection_capture.models import PhotoDirection

logger = logging.getLogger(__name__)

JSON_FILE_NAME = "inspection-data.json"
_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class DocumentStorageError(Exception):
    """The document store could not write an inspection record."""


@dataclass(frozen=True)
class StoredDocument:
    folder_path: str
    json_file: str
    photos: dict[str, str] = field(default_factory=dict)


class DocumentSink(Protocol):
    def store(self, submission: InspectionSubmission, submitted_at: datetime) -> StoredDocument:
        ...


def _folder_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace(":", "-").replace(".", "-")


def _safe_name(value: str) -> str:
    return _UNSAFE_PATH_CHARS.sub("_", value).strip("._") or "unnamed"


class LocalDocumentSink:
    """Writes each inspection into its own folder: a JSON record plus one file per photo."""

    def __init__(self, base_path: str, folder_name: str = "InspectionData"):
        self.root = os.path.join(base_path, folder_name)

    def store(self, submission: InspectionSubmission, submitted_at: datetime) -> StoredDocument:
        folder_name = f"{_safe_name(submission.product_name)}_{_folder_timestamp(submitted_at)}"
        folder_path = os.path.join(self.root, folder_name)

        try:
            os.makedirs(folder_path, exist_ok=True)
            record = {
                "productName": submission.product_name,
                "inspector": submission.inspector,
                "notes": submission.notes,
                "timestamp": submitted_at.astimezone(timezone.utc).isoformat(),
            }
            with open(os.path.join(folder_path, JSON_FILE_NAME), "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise DocumentStorageError(f"Could not write inspection record to {folder_path}: {e}") from e

        photo_paths: dict[str, str] = {}
        for direction in PhotoDirection:
            photo = submission.photos.get(direction)
            if photo is None:
                continue
            path = self._write_photo(folder_path, photo)
            if path:
                photo_paths[direction.value] = path

        return StoredDocument(folder_path=folder_path, json_file=JSON_FILE_NAME, photos=photo_paths)

    def _write_photo(self, folder_path: str, photo: DecodedPhoto) -> str | None:
        path = os.path.join(folder_path, f"{photo.direction.value}.{photo.extension}")
        try:
            with open(path, "wb") as f:
                f.write(photo.content)
        except OSError:
            # One unreadable photo should not lose the rest of the record.
            logger.exception("Failed to save %s photo to %s", photo.direction.value, path)
            return None
        return path
