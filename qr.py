"""Scan link payloads.

A printed QR code encodes ``<base>/scan?data=<json>`` where the JSON is
``{"id": <int>, "timestamp": <ms>}``. The payload is not signed; its only
job is to carry the QR id so that each code can be redeemed once.
"""

import json
import random
import time
from urllib.parse import quote, unquote

from sqlalchemy.orm import Session

from errors import ExhaustedError, InputError
from models import QrUsage, SantaIdentity

# fits a signed 32-bit INTEGER column
MAX_QR_ID = 2**31 - 1


def build_scan_url(base_url: str, qr_id: int, now: float | None = None) -> str:
    ts = int((now if now is not None else time.time()) * 1000)
    data = json.dumps({"id": qr_id, "timestamp": ts}, separators=(",", ":"))
    return base_url.rstrip("/") + "/scan?data=" + quote(data, safe="")


def check_qr_id(qr_id) -> int:
    # bool is an int subclass
    if isinstance(qr_id, bool) or not isinstance(qr_id, int):
        raise InputError("invalid_qr", "This QR code is not valid.")
    if qr_id < 1 or qr_id > MAX_QR_ID:
        raise InputError("invalid_qr", "This QR code is not valid.")
    return qr_id


def parse_scan_payload(data: str) -> int:
    """Return the QR id carried by ``data`` (URL-encoded or raw JSON)."""
    try:
        payload = json.loads(unquote(data))
        qr_id = payload["id"]
    except (ValueError, TypeError, KeyError):
        raise InputError("invalid_qr", "This QR code is not valid.")

    return check_qr_id(qr_id)


def available_qr_ids(db: Session) -> list[int]:
    total = db.query(SantaIdentity).count()
    used = {row.qr_id for row in db.query(QrUsage.qr_id).all()}
    return [i for i in range(1, total + 1) if i not in used]


def next_qr_id(db: Session) -> int:
    ids = available_qr_ids(db)
    if not ids:
        raise ExhaustedError("no_match", "Every QR code has already been used.")
    return random.choice(ids)
