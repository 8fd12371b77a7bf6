"""
RegistryEvent model - ordered, hash-chained outbox of registry notifications.

Each event stores a SHA-256 hash over its content and the previous event's
hash, so rewriting any stored event breaks the chain from that point on.
"""
from sqlalchemy import JSON, Column, DateTime, Integer, String

from .base import Base


class RegistryEvent(Base):
     __tablename__ = "registry_events"

     id = Column(Integer, primary_key=True, autoincrement=True)  # delivery sequence
     event_type = Column(String(64), nullable=False, index=True)
     receipt_id = Column(Integer, nullable=True, index=True)
     payload = Column(JSON, nullable=False)
     event_hash = Column(String(64), nullable=False, unique=True)  # SHA-256 hex length
     previous_hash = Column(String(64), nullable=False)  # "0" for genesis
     created_at = Column(DateTime, nullable=False)

     def __repr__(self):
          return f"<RegistryEvent(id={self.id}, type='{self.event_type}', receipt_id={self.receipt_id})>"

     def to_dict(self) -> dict:
          return {
               "sequence": self.id,
               "event_type": self.event_type,
               "receipt_id": self.receipt_id,
               "payload": self.payload,
               "event_hash": self.event_hash,
               "previous_hash": self.previous_hash,
               "created_at": self.created_at.isoformat() if self.created_at else None,
          }
