import json
from urllib.parse import unquote

import pytest

from errors import ExhaustedError, InputError
from models import QrUsage
from qr import (
    MAX_QR_ID,
    available_qr_ids,
    build_scan_url,
    check_qr_id,
    next_qr_id,
    parse_scan_payload,
)


def test_build_scan_url():
    url = build_scan_url("https://santa.example.org/", 4, now=1700000000.5)

    base, data = url.split("?data=", 1)
    assert base == "https://santa.example.org/scan"
    assert json.loads(unquote(data)) == {"id": 4, "timestamp": 1700000000500}


def test_parse_accepts_raw_and_encoded_json():
    url = build_scan_url("http://localhost:3000", 12)
    assert parse_scan_payload(url.split("?data=", 1)[1]) == 12
    assert parse_scan_payload('{"id": 5, "timestamp": 1}') == 5


@pytest.mark.parametrize(
    "data",
    [
        "",
        "garbage",
        "[1, 2]",
        '{"timestamp": 1}',
        '{"id": "3"}',
        '{"id": 0}',
        '{"id": true}',
        '{"id": 100000000000000000000000, "timestamp": 1}',
    ],
)
def test_parse_rejects_malformed_payloads(data):
    with pytest.raises(InputError) as exc:
        parse_scan_payload(data)
    assert exc.value.kind == "invalid_qr"


def test_available_ids_skip_used_codes(db, seed):
    seed(santas=["Alice", "Bob", "Carol"])
    db.add(QrUsage(qr_id=2, email="a@x.com"))
    db.commit()

    assert available_qr_ids(db) == [1, 3]
    assert next_qr_id(db) in (1, 3)


def test_next_qr_id_exhausted(db):
    with pytest.raises(ExhaustedError) as exc:
        next_qr_id(db)
    assert exc.value.kind == "no_match"


def test_check_qr_id_bounds():
    assert check_qr_id(1) == 1
    assert check_qr_id(MAX_QR_ID) == MAX_QR_ID

    for bad in (0, -5, MAX_QR_ID + 1, 10**23):
        with pytest.raises(InputError):
            check_qr_id(bad)
