from sqlalchemy.orm import Session

from models import LedgerEntry, QrUsage, Registrant, SantaIdentity


def progress(db: Session, include_matches: bool = True) -> dict:
    # Re-aggregated on every call, nothing cached.
    matches = []
    if include_matches:
        rows = (
            db.query(LedgerEntry)
            .order_by(LedgerEntry.created_at.asc(), LedgerEntry.id.asc())
            .all()
        )
        matches = [
            {
                "email": m.email,
                "santaMatch": m.santa_name,
                "scannedAt": m.created_at.isoformat() if m.created_at else None,
            }
            for m in rows
        ]

    return {
        "totalEmails": db.query(Registrant).count(),
        "totalSantas": db.query(SantaIdentity).count(),
        "completedScans": db.query(LedgerEntry).count(),
        "usedQRs": db.query(QrUsage).count(),
        "matches": matches,
    }
