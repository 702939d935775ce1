# cafe/api/__init__.py
from fastapi import HTTPException

from cafe.domain.errors import CafeError, UnauthorizedError

ADMIN_LOGIN_URL = "/admin/login"


def http_error(e: CafeError) -> HTTPException:
    """Blad domenowy -> HTTPException; category w body odroznia np. blad zapisu od blednego kodu."""
    detail = e.to_dict()
    if isinstance(e, UnauthorizedError):
        detail["login_url"] = ADMIN_LOGIN_URL
    return HTTPException(status_code=e.status_code, detail=detail)
