from .receipts import router as receipts_router
from .admin import router as admin_router
from .events import router as events_router

__all__ = [
     "receipts_router",
     "admin_router",
     "events_router",
]
