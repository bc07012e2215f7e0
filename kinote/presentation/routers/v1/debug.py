from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from kinote.infrastructure.memory.registry import RegistrationStores
from kinote.presentation.dependencies import get_registration_stores
from kinote.schemas.responses import PendingItemOut
from kinote.settings import Settings, get_settings


def require_debug_routes(
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    if not settings.debug_routes_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")


router = APIRouter(
    prefix="/debug",
    tags=["Debug"],
    dependencies=[Depends(require_debug_routes)],
)


@router.get("/pending-registrations", response_model=list[PendingItemOut])
async def get_pending_registrations(
    stores: Annotated[RegistrationStores, Depends(get_registration_stores)],
):
    """Keys and deadlines only; secrets and password hashes never leave the store."""
    items: list[PendingItemOut] = []
    for store in (stores.registrations, stores.codes):
        items += [
            PendingItemOut(store=store.name, email=email, expires_at=expires_at)
            for email, expires_at in store.list_all()
        ]
    return items
