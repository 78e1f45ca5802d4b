from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, Boolean, ForeignKey
from sqlalchemy.sql import func
from db import Base


class Registrant(Base):
    __tablename__ = "registrants"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)  # trimmed + lower-cased

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("email", name="uq_registrants_email"),
    )


class SantaIdentity(Base):
    __tablename__ = "santa_identities"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String, nullable=False)
    email = Column(String, nullable=False, default="")  # contact email, may be empty

    # Claim state, flipped once by the matching engine
    assigned = Column(Boolean, nullable=False, default=False, index=True)
    assigned_to = Column(String, nullable=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("name", name="uq_santa_identities_name"),
    )


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, index=True)

    email = Column(String, nullable=False, index=True)
    santa_id = Column(Integer, ForeignKey("santa_identities.id"), nullable=False)
    santa_name = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("email", name="uq_ledger_entries_email"),
    )


class QrUsage(Base):
    __tablename__ = "qr_usages"

    id = Column(Integer, primary_key=True, index=True)

    qr_id = Column(Integer, nullable=False)
    email = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("qr_id", name="uq_qr_usages_qr_id"),
    )
