from .base import Base
from .receipt import Receipt, ImmutableFieldError, MAX_AMOUNT
from .payment_reference import PaymentReference
from .receipt_holder import ReceiptHolder, HolderState
from .registry_state import RegistryState
from .registry_event import RegistryEvent

__all__ = [
     "Base",
     "Receipt",
     "ImmutableFieldError",
     "MAX_AMOUNT",
     "PaymentReference",
     "ReceiptHolder",
     "HolderState",
     "RegistryState",
     "RegistryEvent",
]
