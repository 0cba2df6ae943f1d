"""
Record Codec -- AssetRecord <-> persisted bytes.

Responsibility:
    Encodes an AssetRecord into the stable JSON object stored in world
    state and decodes stored bytes back into an AssetRecord.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Leaf module.

Invariants enforced:
    - Field-named encoding with exactly the fields ``assetID, make, model,
      color, owner`` in that order, all strings, no whitespace.
    - Deterministic: equal records always encode to identical bytes.
    - Round trip: ``decode_asset(encode_asset(r)) == r``.
    - ``<``, ``>``, ``&``, U+2028 and U+2029 are written as ``\\uXXXX``
      escapes so bytes match those produced by existing ledger peers.

Failure modes:
    - EncodeError if a field is not a string or is not UTF-8 encodable.
    - DecodeError on invalid UTF-8, invalid JSON, a non-object document,
      a missing field, or a non-string field.  Unknown extra fields are
      ignored.
"""

from __future__ import annotations

import json
from typing import Any

from asset_ledger.domain.asset import AssetRecord
from asset_ledger.exceptions import DecodeError, EncodeError

# (wire name, attribute name), in encoding order
WIRE_FIELDS: tuple[tuple[str, str], ...] = (
    ("assetID", "asset_id"),
    ("make", "make"),
    ("model", "model"),
    ("color", "color"),
    ("owner", "owner"),
)

_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _escape(text: str) -> str:
    for raw, escaped in _ESCAPES.items():
        text = text.replace(raw, escaped)
    return text


def encode_asset(record: AssetRecord) -> bytes:
    """
    Encode ``record`` to its persisted byte form.

    Raises:
        EncodeError: if any field is not a UTF-8 encodable string.
    """
    doc: dict[str, str] = {}
    for wire_name, attr in WIRE_FIELDS:
        value = getattr(record, attr)
        if not isinstance(value, str):
            raise EncodeError(
                record.asset_id,
                f"field {wire_name!r} must be a string, got {type(value).__name__}",
            )
        doc[wire_name] = value

    text = _escape(json.dumps(doc, ensure_ascii=False, separators=(",", ":")))
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodeError(record.asset_id, str(exc)) from exc


def decode_asset(data: bytes, key: str | None = None) -> AssetRecord:
    """
    Decode persisted bytes into an AssetRecord.

    Args:
        data: Bytes previously produced by ``encode_asset`` (or a peer).
        key: World-state key the bytes were read from, for error context.

    Raises:
        DecodeError: if ``data`` is not a valid encoded record.
    """
    try:
        doc: Any = json.loads(bytes(data).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(str(exc), key=key) from exc

    if not isinstance(doc, dict):
        raise DecodeError(
            f"expected a JSON object, got {type(doc).__name__}", key=key
        )

    values: dict[str, str] = {}
    for wire_name, attr in WIRE_FIELDS:
        if wire_name not in doc:
            raise DecodeError(f"missing field {wire_name!r}", key=key)
        value = doc[wire_name]
        if not isinstance(value, str):
            raise DecodeError(
                f"field {wire_name!r} must be a string, got {type(value).__name__}",
                key=key,
            )
        values[attr] = value

    return AssetRecord(**values)
