from .errors import (
     RegistryError,
     Unauthorized,
     SystemPaused,
     ValidationFailed,
     DuplicateReference,
     NotFound,
     TransferForbidden,
     RegistryNotInitialized,
)
from .events import EventBus, EventType
from .registry_service import ReceiptRegistry

__all__ = [
     "RegistryError",
     "Unauthorized",
     "SystemPaused",
     "ValidationFailed",
     "DuplicateReference",
     "NotFound",
     "TransferForbidden",
     "RegistryNotInitialized",
     "EventBus",
     "EventType",
     "ReceiptRegistry",
]
