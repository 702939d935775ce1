# cafe/domain/schemas.py
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from cafe.domain.order_status import OrderStatus, PaymentMethod


# =====================================================
# CART
# =====================================================
class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    id: str = Field(..., min_length=1, max_length=18, pattern=r"^[0-9]+$", description="ID produktu z katalogu")
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    image: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if isinstance(v, int) else v


class CartItem(CartItemIn):
    """Pozycja w koszyku, quantity nigdy nie jest zapisywane jako 0."""

    quantity: int = Field(..., ge=1)


class QuantityDeltaIn(BaseModel):
    delta: int


class CartOut(BaseModel):
    cart_id: str
    items: List[CartItem]
    total: Decimal
    item_count: int
    is_open: bool = False


# =====================================================
# CHECKOUT / OTP
# =====================================================
class CheckoutStage(str, Enum):
    DETAILS = "details"
    OTP = "otp"
    SUCCESS = "success"


class CustomerDetails(BaseModel):
    """Dane kontaktowe i adres dostawy, walidowane przed wyslaniem kodu."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=r"^[0-9]{10}$")
    address: str = Field(..., min_length=1, max_length=500)
    payment_method: PaymentMethod = PaymentMethod.COD

    @field_validator("name", "address", "phone", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class CheckoutDetailsIn(BaseModel):
    """Surowy formularz - walidacja w CheckoutWorkflow, zeby bledy mialy jeden format."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_method: Optional[str] = None


class PendingOrderDraft(CustomerDetails):
    items: List[CartItem]
    total: Decimal


class CheckoutState(BaseModel):
    checkout_id: str
    stage: CheckoutStage = CheckoutStage.DETAILS
    draft: Optional[PendingOrderDraft] = None
    order_id: Optional[int] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CheckoutOut(BaseModel):
    checkout_id: str
    stage: CheckoutStage
    email: Optional[str] = None
    order_id: Optional[int] = None
    total: Optional[Decimal] = None


class OtpChallenge(BaseModel):
    checkout_id: str
    code: str
    email: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at


class OtpVerifyIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=12)


class OtpDispatchIn(BaseModel):
    email: EmailStr
    otp: str = Field(..., pattern=r"^[0-9]{6}$")


# =====================================================
# ORDERS
# =====================================================
class OrderItemIn(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., gt=0)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if isinstance(v, int) else v


class OrderCreate(BaseModel):
    """Payload endpointu tworzenia zamowienia; brakujace pola odrzuca OrderService (400)."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    items: Optional[List[OrderItemIn]] = None
    total: Optional[Decimal] = None
    payment_method: Optional[str] = None


class OrderCreatedOut(BaseModel):
    success: bool = True
    order_id: int


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_address: str
    total_amount: Decimal
    status: OrderStatus
    payment_method: PaymentMethod
    created_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class OrderSummaryOut(BaseModel):
    """Wiersz listy zamowien w panelu admina."""

    id: int
    customer_name: str
    customer_phone: str
    total_amount: Decimal
    status: OrderStatus
    payment_method: PaymentMethod
    item_summary: str
    created_at: datetime


class DashboardStatsOut(BaseModel):
    total_orders: int
    pending_count: int
    revenue: Decimal


class StatusUpdateIn(BaseModel):
    status: str


# =====================================================
# AUTH
# =====================================================
class AdminLoginIn(BaseModel):
    password: str = ""


class UserLoginIn(BaseModel):
    phone: str = ""


class SessionRecord(BaseModel):
    token: str
    kind: str  # "admin" | "user"
    subject: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(timezone.utc)) >= self.expires_at


# =====================================================
# CATALOG
# =====================================================
class CategoryIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    slug: str = Field(..., min_length=2, max_length=50, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None


class CategoryOut(BaseModel):
    id: int
    slug: str
    name: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProductIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=5)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    image: str = Field(..., pattern=r"^(https?://|/)\S+$")
    category_id: Optional[int] = Field(None, gt=0)
    is_popular: bool = False
    is_available: bool = True
    badge_text: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, min_length=5)
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    image: Optional[str] = Field(None, pattern=r"^(https?://|/)\S+$")
    category_id: Optional[int] = Field(None, gt=0)
    is_popular: Optional[bool] = None
    is_available: Optional[bool] = None
    badge_text: Optional[str] = None


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal
    image: str
    category_id: Optional[int] = None
    is_popular: bool
    is_available: bool
    badge_text: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# STORE SETTINGS
# =====================================================
class DayTimings(BaseModel):
    open: str = Field("08:00", pattern=r"^\d{2}:\d{2}$")
    close: str = Field("22:00", pattern=r"^\d{2}:\d{2}$")
    is_closed: bool = False


class StoreSettingsIn(BaseModel):
    """Czesciowa aktualizacja - pola pominiete zostaja bez zmian."""

    store_name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    google_maps_link: Optional[str] = None
    logo_url: Optional[str] = None
    store_open: Optional[bool] = None
    timings: Optional[dict[str, DayTimings]] = None
    cod_enabled: Optional[bool] = None
    upi_enabled: Optional[bool] = None
    upi_id: Optional[str] = None
    upi_qr_code_url: Optional[str] = None
    admin_name: Optional[str] = None
    admin_email: Optional[EmailStr] = None
    admin_photo_url: Optional[str] = None
    order_notifications: Optional[bool] = None
    email_notifications: Optional[bool] = None
    sound_notifications: Optional[bool] = None


class StoreSettingsOut(BaseModel):
    store_name: str
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    google_maps_link: Optional[str] = None
    logo_url: Optional[str] = None
    store_open: bool = True
    timings: dict[str, DayTimings] = {}
    cod_enabled: bool = True
    upi_enabled: bool = False
    upi_id: Optional[str] = None
    upi_qr_code_url: Optional[str] = None
    admin_name: Optional[str] = None
    admin_email: Optional[str] = None
    admin_photo_url: Optional[str] = None
    order_notifications: bool = True
    email_notifications: bool = False
    sound_notifications: bool = True

    model_config = ConfigDict(from_attributes=True)
