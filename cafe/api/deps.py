# cafe/api/deps.py
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, HTTPException, Path, Request
from sqlalchemy.orm import Session

from cafe.api import ADMIN_LOGIN_URL
from cafe.data.database import get_db
from cafe.data.redis_client import get_redis
from cafe.domain.schemas import SessionRecord
from cafe.repos.cart_repo import CartStorage, MemoryCartStorage, RedisCartStorage
from cafe.repos.checkout_repo import MemoryCheckoutStateStore, RedisCheckoutStateStore
from cafe.repos.otp_repo import MemoryOtpChallengeStore, RedisOtpChallengeStore
from cafe.repos.session_repo import MemorySessionStore, RedisSessionStore
from cafe.services.auth_service import AuthService, SessionStore
from cafe.services.cache_service import ListingCache, MemoryListingCache
from cafe.services.cart_service import CartStore
from cafe.services.catalog_service import CatalogService
from cafe.services.checkout_service import CheckoutStateStore, CheckoutWorkflow
from cafe.services.lock_service import LockService, MemoryLockService
from cafe.services.notification_service import Notifier, build_notifier
from cafe.services.order_service import OrderService
from cafe.services.otp_service import OtpChallengeStore, OtpService
from cafe.services.rate_limit_service import MemoryRateLimiter, RateLimiter
from cafe.services.settings_service import SettingsService

ADMIN_COOKIE = "admin_session"
USER_COOKIE = "session_phone"

CART_ID = Path(..., pattern=r"^[A-Za-z0-9_-]{8,64}$", description="ID sesji koszyka klienta")


@dataclass
class Stores:
    """Stan poza baza relacyjna: redis albo (pusty REDIS_URL) pamiec procesu."""

    carts: CartStorage
    otp: OtpChallengeStore
    checkouts: CheckoutStateStore
    sessions: SessionStore
    locks: LockService
    rate_limiter: RateLimiter
    listing_cache: ListingCache


def build_stores() -> Stores:
    client = get_redis()
    if client is None:
        return Stores(
            carts=MemoryCartStorage(),
            otp=MemoryOtpChallengeStore(),
            checkouts=MemoryCheckoutStateStore(),
            sessions=MemorySessionStore(),
            locks=MemoryLockService(),
            rate_limiter=MemoryRateLimiter(),
            listing_cache=MemoryListingCache(),
        )
    return Stores(
        carts=RedisCartStorage(client),
        otp=RedisOtpChallengeStore(client),
        checkouts=RedisCheckoutStateStore(client),
        sessions=RedisSessionStore(client),
        locks=LockService(client),
        rate_limiter=RateLimiter(client),
        listing_cache=ListingCache(client),
    )


@lru_cache(maxsize=1)
def get_stores() -> Stores:
    return build_stores()


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    return build_notifier()


def get_cart(cart_id: str = CART_ID, stores: Stores = Depends(get_stores)) -> CartStore:
    return CartStore(stores.carts, cart_id)


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_order_service(db: Session = Depends(get_db), stores: Stores = Depends(get_stores)) -> OrderService:
    return OrderService(db, cache=stores.listing_cache)


def get_otp_service(stores: Stores = Depends(get_stores), notifier: Notifier = Depends(get_notifier)) -> OtpService:
    return OtpService(stores.otp, notifier)


def get_auth_service(stores: Stores = Depends(get_stores)) -> AuthService:
    return AuthService(stores.sessions, stores.rate_limiter)


def get_checkout(
    cart_id: str = CART_ID,
    cart: CartStore = Depends(get_cart),
    otp_service: OtpService = Depends(get_otp_service),
    order_service: OrderService = Depends(get_order_service),
    stores: Stores = Depends(get_stores),
) -> CheckoutWorkflow:
    #checkout_id == cart_id, jeden checkout na koszyk
    return CheckoutWorkflow(
        checkout_id=cart_id,
        cart=cart,
        otp_service=otp_service,
        order_service=order_service,
        state_store=stores.checkouts,
        lock_service=stores.locks,
    )


def get_admin_session(request: Request, auth: AuthService = Depends(get_auth_service)) -> SessionRecord | None:
    return auth.get_admin_session(request.cookies.get(ADMIN_COOKIE))


def require_admin(session: SessionRecord | None = Depends(get_admin_session)) -> SessionRecord:
    if session is None:
        raise HTTPException(
            status_code=401,
            detail={
                "category": "unauthorized",
                "message": "Admin session required",
                "login_url": ADMIN_LOGIN_URL,
            },
        )
    return session


def get_user_phone(request: Request, auth: AuthService = Depends(get_auth_service)) -> str | None:
    return auth.get_user_phone(request.cookies.get(USER_COOKIE))
