"""Registrant -> Santa identity matching.

A match is a claim on one unassigned Santa identity plus a ledger entry (and,
for QR-gated requests, a QR usage record), written in a single transaction.
The claim itself is a conditional UPDATE on ``assigned = false`` so that two
concurrent requests can never take the same identity.
"""

import logging
import random
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from errors import EligibilityError, ExhaustedError, InputError, SantaError
from models import LedgerEntry, QrUsage, Registrant, SantaIdentity
from qr import check_qr_id

logger = logging.getLogger(__name__)


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def request_match(db: Session, email: str | None, qr_id: int | None = None) -> str:
    """Match ``email`` with a random unassigned Santa identity.

    Returns the Santa identity's name. Raises a ``SantaError`` for every
    business-rule rejection; the session is rolled back before raising, so a
    rejected request never leaves a partial claim behind.
    """
    email_norm = normalize_email(email)
    if not email_norm:
        raise InputError("missing_fields", "Please enter your email")
    if qr_id is not None:
        check_qr_id(qr_id)

    try:
        _check_eligibility(db, email_norm, qr_id)
        santa_id, santa_name = _claim(db, email_norm)

        db.add(LedgerEntry(email=email_norm, santa_id=santa_id, santa_name=santa_name))
        if qr_id is not None:
            db.add(QrUsage(qr_id=qr_id, email=email_norm))
        db.commit()
    except SantaError:
        db.rollback()
        raise
    except IntegrityError:
        # A concurrent request for the same registrant or QR code committed
        # first. Rolling back releases our claim.
        db.rollback()
        _check_eligibility(db, email_norm, qr_id)
        raise

    logger.info("Matched %s (qr=%s)", email_norm, qr_id)
    return santa_name


def _check_eligibility(db: Session, email: str, qr_id: int | None) -> None:
    if qr_id is not None:
        used = db.query(QrUsage).filter(QrUsage.qr_id == qr_id).first()
        if used:
            logger.info("Rejected %s: QR %s already used", email, qr_id)
            raise EligibilityError("qr_used", "This QR code has already been used!")

    registrant = db.query(Registrant).filter(Registrant.email == email).first()
    if not registrant:
        logger.info("Rejected %s: not registered", email)
        raise EligibilityError(
            "invalid_email",
            "This email is not registered for Secret Santa.",
            status_code=404,
        )

    existing = db.query(LedgerEntry).filter(LedgerEntry.email == email).first()
    if existing:
        logger.info("Rejected %s: already matched", email)
        extra = {}
        if settings.REVEAL_EXISTING_MATCH:
            extra["existingMatch"] = existing.santa_name
        raise EligibilityError(
            "already_scanned", "You have already received your match!", **extra
        )


def _unassigned_candidates(db: Session, email: str) -> list[tuple[int, str]]:
    q = db.query(SantaIdentity.id, SantaIdentity.name).filter(
        SantaIdentity.assigned.is_(False)
    )
    if settings.PREVENT_SELF_MATCH:
        q = q.filter(SantaIdentity.email != email)
    return q.all()


def _claim(db: Session, email: str) -> tuple[int, str]:
    for attempt in range(max(settings.MATCH_CLAIM_RETRIES, 1)):
        candidates = _unassigned_candidates(db, email)
        if not candidates:
            break

        santa_id, santa_name = random.choice(candidates)
        result = db.execute(
            update(SantaIdentity)
            .where(SantaIdentity.id == santa_id, SantaIdentity.assigned.is_(False))
            .values(
                assigned=True,
                assigned_to=email,
                assigned_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return santa_id, santa_name

        logger.warning("Lost claim race on santa %s (attempt %d)", santa_id, attempt + 1)

    raise ExhaustedError("no_santas", "All Secret Santas have been assigned!")
