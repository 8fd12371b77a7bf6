"""
Registry error taxonomy.

Every rejected operation raises a RegistryError subclass carrying a stable
code, an HTTP status for the API layer and the offending field or id.
"""
from typing import Any, Optional


class RegistryError(Exception):
     """Base registry error with structured details."""

     code = "REGISTRY_ERROR"
     status_code = 400

     def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
          self.message = message
          self.details = details or {}
          super().__init__(message)

     def to_dict(self) -> dict:
          return {"code": self.code, "message": self.message, "details": self.details}


class Unauthorized(RegistryError):
     """Caller is not the registry administrator."""

     code = "UNAUTHORIZED"
     status_code = 403

     def __init__(self, caller: Optional[str]):
          super().__init__(
               "Caller is not the registry administrator",
               details={"caller": caller},
          )


class SystemPaused(RegistryError):
     """Issuance attempted while the pause switch is active."""

     code = "SYSTEM_PAUSED"
     status_code = 503

     def __init__(self):
          super().__init__("Issuance is paused")


class ValidationFailed(RegistryError):
     """A submitted field is empty, zero or malformed."""

     code = "VALIDATION_FAILED"
     status_code = 422

     def __init__(self, field: str, message: str):
          self.field = field
          super().__init__(message, details={"field": field})


class DuplicateReference(RegistryError):
     """Payment reference fingerprint is already reserved."""

     code = "DUPLICATE_REFERENCE"
     status_code = 409

     def __init__(self, reference: str):
          self.reference = reference
          super().__init__(
               f"Payment reference '{reference}' has already been used",
               details={"payment_reference": reference},
          )


class NotFound(RegistryError):
     """Operation targets a receipt id that is not in the store."""

     code = "NOT_FOUND"
     status_code = 404

     def __init__(self, receipt_id: int):
          self.receipt_id = receipt_id
          super().__init__(
               f"Receipt with ID {receipt_id} not found",
               details={"receipt_id": receipt_id},
          )


class TransferForbidden(RegistryError):
     """Holder change violates the soulbound rule."""

     code = "TRANSFER_FORBIDDEN"
     status_code = 403

     def __init__(self, receipt_id: int, current: Optional[str], requested: Optional[str]):
          self.receipt_id = receipt_id
          super().__init__(
               f"Receipt {receipt_id} is non-transferable",
               details={"receipt_id": receipt_id, "from": current, "to": requested},
          )


class RegistryNotInitialized(RegistryError):
     """No registry state row exists yet (no administrator configured)."""

     code = "REGISTRY_NOT_INITIALIZED"
     status_code = 503

     def __init__(self):
          super().__init__("Registry has not been initialized with an administrator")
