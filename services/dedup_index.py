"""
Dedup index over payment references.

A reference is normalized (Unicode NFC, surrounding whitespace stripped,
case preserved) and fingerprinted with SHA-256. Reservations are permanent.
"""
import hashlib
import unicodedata
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import PaymentReference
from services.errors import DuplicateReference


def normalize_reference(reference: str) -> str:
     """Canonical form of a reference for hashing."""
     return unicodedata.normalize("NFC", reference or "").strip()


def fingerprint(reference: str) -> str:
     """
     Compute the SHA-256 fingerprint of a payment reference.

     Returns 64-char hex string.
     """
     return hashlib.sha256(normalize_reference(reference).encode("utf-8")).hexdigest()


def lookup(db: Session, reference: str) -> Optional[PaymentReference]:
     return db.get(PaymentReference, fingerprint(reference))


def is_used(db: Session, reference: str) -> bool:
     """Pure lookup, no side effects."""
     return lookup(db, reference) is not None


def reserve(db: Session, reference: str) -> PaymentReference:
     """
     Mark a reference as used.

     The caller attaches the consuming receipt id once it is allocated; the
     whole reservation belongs to the caller's transaction.

     Raises:
          DuplicateReference: If the fingerprint is already reserved.
     """
     if is_used(db, reference):
          raise DuplicateReference(reference)

     entry = PaymentReference(fingerprint=fingerprint(reference))
     db.add(entry)
     try:
          db.flush()
     except IntegrityError:
          # Primary key collision on the fingerprint column
          raise DuplicateReference(reference)
     return entry
