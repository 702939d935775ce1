# cafe/api/routers/store.py
from fastapi import APIRouter, Depends

from cafe.api.deps import get_settings_service
from cafe.domain.schemas import StoreSettingsOut
from cafe.services.settings_service import SettingsService

router = APIRouter(tags=["store"])


@router.get(
    "/settings",
    response_model=StoreSettingsOut,
    response_model_exclude={"admin_name", "admin_email", "admin_photo_url"},
)
def public_settings(svc: SettingsService = Depends(get_settings_service)):
    return svc.get_settings()
