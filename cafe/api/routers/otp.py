# cafe/api/routers/otp.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cafe.api.deps import get_otp_service
from cafe.domain.errors import DispatchError
from cafe.domain.schemas import OtpDispatchIn
from cafe.services.otp_service import OtpService

router = APIRouter(prefix="/otp", tags=["otp"])


@router.post("/")
def dispatch_otp(payload: OtpDispatchIn, svc: OtpService = Depends(get_otp_service)):
    try:
        svc.dispatch_code(payload.email, payload.otp)
    except DispatchError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "category": e.category, "error": e.message},
        )
    return {"success": True, "message": "OTP sent successfully"}
