import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from errors import DuplicateError, InputError
from matching import normalize_email
from models import LedgerEntry, QrUsage, Registrant, SantaIdentity

logger = logging.getLogger(__name__)

CLEAR_SCOPES = ("emails", "santas", "matches", "all")


def add_registrant(db: Session, email: str) -> Registrant:
    email_norm = normalize_email(email)
    if not email_norm:
        raise InputError("missing_fields", "Email is required")

    existing = db.query(Registrant).filter(Registrant.email == email_norm).first()
    if existing:
        raise DuplicateError("duplicate_email", "Email already exists")

    registrant = Registrant(email=email_norm)
    db.add(registrant)
    db.commit()
    db.refresh(registrant)
    return registrant


def add_santa(db: Session, name: str, contact_email: str | None = None) -> SantaIdentity:
    name_clean = (name or "").strip()
    if not name_clean:
        raise InputError("missing_fields", "Santa name is required")

    existing = db.query(SantaIdentity).filter(SantaIdentity.name == name_clean).first()
    if existing:
        raise DuplicateError("duplicate_santa", "Santa name already exists")

    santa = SantaIdentity(
        name=name_clean,
        email=normalize_email(contact_email),
        assigned=False,
    )
    db.add(santa)
    db.commit()
    db.refresh(santa)
    return santa


def _clear_matches(db: Session) -> None:
    db.query(LedgerEntry).delete(synchronize_session=False)
    db.query(QrUsage).delete(synchronize_session=False)


def clear(db: Session, scope: str) -> str:
    """Bulk delete for one scope. Returns a human-readable summary."""
    if scope == "emails":
        db.query(Registrant).delete(synchronize_session=False)
        message = "Emails cleared"
    elif scope == "santas":
        # ledger entries must never outlive the identity they point at
        _clear_matches(db)
        db.query(SantaIdentity).delete(synchronize_session=False)
        message = "Santa names cleared"
    elif scope == "matches":
        _clear_matches(db)
        db.execute(
            update(SantaIdentity)
            .values(assigned=False, assigned_to=None, assigned_at=None)
            .execution_options(synchronize_session=False)
        )
        message = "All assignments reset"
    elif scope == "all":
        _clear_matches(db)
        db.query(Registrant).delete(synchronize_session=False)
        db.query(SantaIdentity).delete(synchronize_session=False)
        message = "All data cleared"
    else:
        raise InputError("invalid_scope", f"Unknown scope: {scope}", status_code=422)

    db.commit()
    logger.warning("Admin cleared scope %s", scope)
    return message


def list_participants(db: Session) -> dict:
    emails = db.query(Registrant).order_by(Registrant.id.asc()).all()
    santas = db.query(SantaIdentity).order_by(SantaIdentity.id.asc()).all()

    return {
        "emails": [{"id": e.id, "email": e.email} for e in emails],
        "santaNames": [
            {
                "id": s.id,
                "name": s.name,
                "email": s.email,
                "assigned": s.assigned,
            }
            for s in santas
        ],
    }
