"""
Registry administration routes: pause switch and administrator handover.
"""
from fastapi import APIRouter, Depends

from dependencies import get_caller, get_registry
from schemas.admin import (
     AdminTransferRequest,
     AdminTransferResponse,
     PauseStateResponse,
     RegistryStatusResponse,
)
from services import ReceiptRegistry

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/status", response_model=RegistryStatusResponse)
def registry_status(registry: ReceiptRegistry = Depends(get_registry)):
     return RegistryStatusResponse(**registry.status())


@router.post("/pause", response_model=PauseStateResponse)
def pause(caller: str = Depends(get_caller), registry: ReceiptRegistry = Depends(get_registry)):
     return PauseStateResponse(paused=registry.pause(caller))


@router.post("/unpause", response_model=PauseStateResponse)
def unpause(caller: str = Depends(get_caller), registry: ReceiptRegistry = Depends(get_registry)):
     return PauseStateResponse(paused=registry.unpause(caller))


@router.post("/transfer", response_model=AdminTransferResponse)
def transfer_admin(
     body: AdminTransferRequest,
     caller: str = Depends(get_caller),
     registry: ReceiptRegistry = Depends(get_registry)
):
     return AdminTransferResponse(admin=registry.transfer_admin(caller, body.new_admin))
