"""Product-name extraction from scanned Data-Matrix / QR payloads.

Two label generations are in circulation. Newer labels carry a Data-Matrix
symbol with GS-separated, letter-tagged fields::

    [)>RS 06 GS VSBH4 GS P91958CU810PD GS SHB81 GS EJW124052 GS ... GS C020100007000000A2 GS RS EOT

and the product name is assembled from three of those fields
(``91958CU810`` + ``JW`` + ``007``). Older labels print the product code as
plain text inside a QR symbol (``91958-PI010``).

Nothing here raises for malformed input: an unrecognized payload is reported
as ``None`` (or a result with ``ok=False``) so the operator can rescan.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

GS = "\x1d"
# Some scanner firmwares emit the printable control picture instead of the GS byte.
GS_PLACEHOLDER = "␝"

DATAMATRIX_MARKER = "VSBH4"
SH_MARKER = "SH"

_PART_NUMBER_LEN = 10
_COLOR_CODE_LEN = 2
_C_FIELD_MIN_LEN = 9
_SEQUENCE_SLICE = slice(6, 9)
_SEQUENCE_LEN = 3
_QR_MAX_LEN = 15

_NON_DIGIT = re.compile(r"\D", re.ASCII)


@dataclass(frozen=True)
class FieldResult:
    ok: bool
    value: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProductCodeResult:
    ok: bool
    value: str | None = None
    error: str | None = None
    symbology: str | None = None


def _found(value: str) -> FieldResult:
    return FieldResult(ok=True, value=value)


def _missing(error: str) -> FieldResult:
    return FieldResult(ok=False, error=error)


def normalize_separators(raw: str) -> str:
    """Replace every placeholder glyph with the real GS byte."""
    return raw.replace(GS_PLACEHOLDER, GS)


def _field_pattern(tag: str) -> re.Pattern:
    return re.compile(re.escape(GS) + tag + "([^" + GS + "]+)")


_P_FIELD = _field_pattern("P")
_E_FIELD = _field_pattern("E")
_C_FIELD = _field_pattern("C")


def _field_after(data: str, marker: str, field: re.Pattern, name: str) -> FieldResult:
    index = data.find(marker)
    if index == -1:
        return _missing(f"{marker} marker not found")
    match = field.search(data, index + len(marker))
    if match is None:
        return _missing(f"{name} field not found after {marker}")
    return _found(match.group(1))


def _part_number(data: str) -> FieldResult:
    field = _field_after(data, DATAMATRIX_MARKER, _P_FIELD, "P")
    if not field.ok:
        return field
    if len(field.value) < _PART_NUMBER_LEN:
        return _missing(f"P field too short: {field.value!r}")
    return _found(field.value[:_PART_NUMBER_LEN])


def _color_code(data: str) -> FieldResult:
    field = _field_after(data, SH_MARKER, _E_FIELD, "E")
    if not field.ok:
        return field
    if len(field.value) < _COLOR_CODE_LEN:
        return _missing(f"E field too short: {field.value!r}")
    return _found(field.value[:_COLOR_CODE_LEN])


def _sequence(data: str) -> FieldResult:
    match = _C_FIELD.search(data)
    if match is None:
        return _missing("C field not found")
    value = match.group(1)
    if len(value) < _C_FIELD_MIN_LEN:
        return _missing(f"C field too short: {value!r}")
    digits = _NON_DIGIT.sub("", value[_SEQUENCE_SLICE])
    if len(digits) < _SEQUENCE_LEN:
        return _missing(f"C field has no sequence digits: {value!r}")
    return _found(digits[:_SEQUENCE_LEN])


def parse_datamatrix(raw: str) -> FieldResult:
    """Build ``part number + color code + sequence`` from a Data-Matrix payload.

    A successful result is always exactly 15 characters long.
    """
    data = normalize_separators(raw)
    if DATAMATRIX_MARKER not in data:
        return _missing(f"{DATAMATRIX_MARKER} marker not found")

    segments = []
    for step in (_part_number, _color_code, _sequence):
        segment = step(data)
        if not segment.ok:
            return segment
        segments.append(segment.value)
    return _found("".join(segments))


# QR / label text. Order matters: the first pattern that matches wins.
def _dashed_code(text: str) -> str | None:
    match = re.search(r"(\d{5})-?([A-Z]{2}\d{3})", text, re.ASCII)
    return match.group(1) + match.group(2) if match else None


def _compact_code(text: str) -> str | None:
    match = re.search(r"\d{5}[A-Z]{2}\d{3}", text, re.ASCII)
    return match.group(0) if match else None


def _py_code(text: str) -> str | None:
    match = re.search(r"PY(\d+)", text, re.ASCII)
    return "PY" + match.group(1) if match else None


def _long_letter_code(text: str) -> str | None:
    match = re.search(r"(\d{5})-?([A-Z]+)(\d{3})", text, re.ASCII)
    return "".join(match.groups()) if match else None


def _leading_digits_code(text: str) -> str | None:
    match = re.search(r"\d{5,}[A-Z0-9]+", text, re.ASCII)
    if not match:
        return None
    return re.sub(r"[^A-Z0-9]", "", match.group(0))[:_QR_MAX_LEN]


QR_MATCHERS: tuple[Callable[[str], str | None], ...] = (
    _dashed_code,
    _compact_code,
    _py_code,
    _long_letter_code,
    _leading_digits_code,
)


def parse_label_text(raw: str) -> FieldResult:
    for matcher in QR_MATCHERS:
        value = matcher(raw)
        if value:
            return _found(value)
    return _missing("no label pattern matched")


def extract_product_code(raw: str | None) -> ProductCodeResult:
    """Parse a scanned payload, reporting which path matched or why none did."""
    if not isinstance(raw, str) or not raw.strip():
        return ProductCodeResult(ok=False, error="Scanned data is empty.")

    datamatrix = parse_datamatrix(raw)
    if datamatrix.ok:
        return ProductCodeResult(ok=True, value=datamatrix.value, symbology="datamatrix")
    logger.debug("Data-Matrix parse failed (%s), trying label text", datamatrix.error)

    label = parse_label_text(raw)
    if label.ok:
        return ProductCodeResult(ok=True, value=label.value, symbology="qr")

    error = f"{datamatrix.error}; {label.error}"
    logger.info("Unrecognized scan payload %r: %s", raw, error)
    return ProductCodeResult(ok=False, error=error)


def parse_product_code(raw: str | None) -> str | None:
    """Return the product name encoded in ``raw``, or ``None`` when unrecognized."""
    return extract_product_code(raw).value
