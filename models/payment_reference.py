"""
PaymentReference model - the dedup index.

A row means the fingerprint is used. Rows are never deleted, including when
the receipt that consumed the reference is revoked.
"""
from sqlalchemy import Column, DateTime, Integer, String, func

from .base import Base


class PaymentReference(Base):
     __tablename__ = "payment_references"

     fingerprint = Column(String(64), primary_key=True)  # SHA-256 hex length
     receipt_id = Column(Integer, nullable=True, index=True)  # no FK: receipts can be erased
     reserved_at = Column(DateTime, server_default=func.now(), nullable=False)

     def __repr__(self):
          return f"<PaymentReference(fingerprint={self.fingerprint[:16]}..., receipt_id={self.receipt_id})>"
