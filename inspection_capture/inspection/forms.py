from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field

from inspection_capture.models import PhotoDirection

_PRODUCT_NAME_MAX = 64
_INSPECTOR_MAX = 128
_DATA_URL = re.compile(r"^data:(image/[\w.+-]+);base64,", re.IGNORECASE)
_DEFAULT_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class DecodedPhoto:
	direction: PhotoDirection
	content: bytes
	content_type: str = _DEFAULT_CONTENT_TYPE

	@property
	def extension(self) -> str:
		subtype = self.content_type.split("/", 1)[-1].lower()
		return "jpg" if subtype in {"jpeg", "pjpeg"} else subtype


@dataclass(frozen=True)
class InspectionSubmission:
	product_name: str
	inspector: str
	notes: str | None = None
	scan_id: str | None = None
	photos: dict[PhotoDirection, DecodedPhoto] = field(default_factory=dict)


@dataclass(frozen=True)
class InspectionValidationResult:
	ok: bool
	value: InspectionSubmission | None = None
	error: str | None = None


def _text(raw) -> str:
	if not isinstance(raw, str):
		return ""
	return raw.strip()


def decode_photo(direction: PhotoDirection, raw: str) -> DecodedPhoto:
	"""Decode a base64 photo, with or without a ``data:image/...;base64,`` prefix.

	Raises ValueError when the payload is not valid base64 or is empty.
	"""
	content_type = _DEFAULT_CONTENT_TYPE
	match = _DATA_URL.match(raw)
	if match:
		content_type = match.group(1).lower()
		raw = raw[match.end():]
	try:
		content = base64.b64decode("".join(raw.split()), validate=True)
	except (binascii.Error, ValueError) as e:
		raise ValueError(f"{direction.value} photo is not valid base64") from e
	if not content:
		raise ValueError(f"{direction.value} photo is empty")
	return DecodedPhoto(direction=direction, content=content, content_type=content_type)


def validate_inspection(payload) -> InspectionValidationResult:
	if not isinstance(payload, dict):
		return InspectionValidationResult(ok=False, error="Request body must be a JSON object.")

	product_name = _text(payload.get("productName"))
	inspector = _text(payload.get("inspector"))
	if not product_name or not inspector:
		return InspectionValidationResult(ok=False, error="Product name and inspector are required.")
	if len(product_name) > _PRODUCT_NAME_MAX:
		return InspectionValidationResult(
			ok=False,
			error=f"Product name must be at most {_PRODUCT_NAME_MAX} characters.",
		)
	if len(inspector) > _INSPECTOR_MAX:
		return InspectionValidationResult(
			ok=False,
			error=f"Inspector must be at most {_INSPECTOR_MAX} characters.",
		)

	raw_photos = payload.get("photos") or {}
	if not isinstance(raw_photos, dict):
		return InspectionValidationResult(ok=False, error="Photos must be an object keyed by direction.")

	photos: dict[PhotoDirection, DecodedPhoto] = {}
	for key, raw in raw_photos.items():
		try:
			direction = PhotoDirection(key)
		except ValueError:
			return InspectionValidationResult(ok=False, error=f"Unknown photo direction: {key}")
		if raw is None or raw == "":
			continue
		if not isinstance(raw, str):
			return InspectionValidationResult(ok=False, error=f"{key} photo must be a base64 string.")
		try:
			photos[direction] = decode_photo(direction, raw)
		except ValueError as e:
			return InspectionValidationResult(ok=False, error=str(e))

	notes = _text(payload.get("notes")) or None
	scan_id = _text(payload.get("scanId")) or None

	return InspectionValidationResult(
		ok=True,
		value=InspectionSubmission(
			product_name=product_name,
			inspector=inspector,
			notes=notes,
			scan_id=scan_id,
			photos=photos,
		),
	)
