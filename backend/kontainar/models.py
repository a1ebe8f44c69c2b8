# Overview: SQLAlchemy model for the key-value blob table backing every collection.

from __future__ import annotations

from .extensions import db
from .time_utils import utcnow, to_utc_z


class StorageEntry(db.Model):
    """
    One serialized collection.

    Each row holds the complete JSON array for a storage key. Collections are
    never stored row-per-record; every write replaces the whole blob.
    """
    __tablename__ = "storage_entries"

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "size": len(self.value or ""),
            "updated_at": to_utc_z(self.updated_at),
        }
