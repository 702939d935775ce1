# cafe/services/checkout_service.py
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from cafe.domain.errors import (
    EmptyCartError,
    InvalidCodeError,
    PersistenceError,
    ValidationError,
    WorkflowStateError,
)
from cafe.domain.schemas import (
    CheckoutDetailsIn,
    CheckoutStage,
    CheckoutState,
    CustomerDetails,
    OrderCreate,
    OrderItemIn,
    PendingOrderDraft,
)
from cafe.services.cart_service import CartStore
from cafe.services.lock_service import LockService
from cafe.services.order_service import OrderService
from cafe.services.otp_service import OtpService
from cafe.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutStateStore(Protocol):
    def load(self, checkout_id: str) -> CheckoutState | None: ...

    def save(self, state: CheckoutState) -> None: ...

    def delete(self, checkout_id: str) -> None: ...


def validate_details(data: CheckoutDetailsIn | dict) -> CustomerDetails:
    if isinstance(data, CheckoutDetailsIn):
        data = data.model_dump(exclude_none=True)
    try:
        return CustomerDetails.model_validate(data)
    except PydanticValidationError as e:
        fields = {
            ".".join(str(p) for p in err["loc"]): err["msg"]
            for err in e.errors()
        }
        raise ValidationError("Please fill in all details correctly", fields=fields) from None


class CheckoutWorkflow:
    """
    Skladanie zamowienia: details -> otp -> success.

    - details: walidacja danych + niepusty koszyk, potem wysylka kodu OTP
    - otp: poprawny kod -> zapis zamowienia (dokladnie raz), dopiero potem czyszczenie koszyka
    - success: koniec, nowy checkout przez reset()

    Kazde przejscie wymaga jawnego sukcesu poprzedniego kroku. Zewnetrzne wywolania
    (wysylka maila, zapis) ida pod lockiem checkoutu - drugie klikniecie nie zrobi drugiego zamowienia.
    """

    def __init__(
        self,
        checkout_id: str,
        cart: CartStore,
        otp_service: OtpService,
        order_service: OrderService,
        state_store: CheckoutStateStore,
        lock_service: LockService,
    ):
        self.checkout_id = checkout_id
        self.cart = cart
        self.otp_service = otp_service
        self.order_service = order_service
        self.state_store = state_store
        self.lock_service = lock_service
        self.state = state_store.load(checkout_id) or CheckoutState(checkout_id=checkout_id)

    @property
    def stage(self) -> CheckoutStage:
        return self.state.stage

    @property
    def _lock_name(self) -> str:
        return f"checkout:{self.checkout_id}"

    def _transition(self, **changes) -> CheckoutState:
        self.state = self.state.model_copy(update=changes)
        self.state_store.save(self.state)
        return self.state

    def submit_details(self, data: CheckoutDetailsIn | dict) -> CheckoutState:
        if self.stage == CheckoutStage.SUCCESS:
            raise WorkflowStateError("This checkout is already complete, start a new one")

        #koszyk mogl zostac oprozniony w innej karcie
        if self.cart.is_empty():
            raise EmptyCartError("Your cart is empty")

        details = validate_details(data)
        self.order_service.settings.ensure_accepting_orders(details.payment_method)

        with self.lock_service.hold(self._lock_name):
            # DispatchError leci wyzej, etap zostaje bez zmian
            self.otp_service.request_otp(self.checkout_id, details.email)

        draft = PendingOrderDraft(
            **details.model_dump(),
            items=self.cart.items,
            total=self.cart.total,
        )
        logger.info(f"Checkout {self.checkout_id}: details accepted, waiting for code sent to {details.email}")
        return self._transition(stage=CheckoutStage.OTP, draft=draft, order_id=None)

    def change_email(self) -> CheckoutState:
        if self.stage != CheckoutStage.OTP:
            raise WorkflowStateError("No verification in progress")

        self.otp_service.discard(self.checkout_id)
        logger.info(f"Checkout {self.checkout_id}: code discarded, back to details")
        return self._transition(stage=CheckoutStage.DETAILS)

    def submit_code(self, code: str) -> CheckoutState:
        if self.stage != CheckoutStage.OTP or self.state.draft is None:
            raise WorkflowStateError("Please submit your details and request a code first")

        with self.lock_service.hold(self._lock_name):
            #kod nie jest zuzywany przy weryfikacji - nieudany zapis mozna ponowic tym samym kodem
            challenge = self.otp_service.verify_otp(self.checkout_id, code, consume=False)
            if challenge.email != self.state.draft.email:
                raise InvalidCodeError("Verification code was issued for a different email address")

            self._commit()

        return self.state

    def _commit(self) -> int:
        """
        Zapis zamowienia z aktualnych pozycji koszyka (nazwa i cena ze snapshotu pozycji,
        nie z katalogu). Koszyk czyszczony dopiero po potwierdzeniu zapisu.

        Po zapisie etap success z order_id jest utrwalany przed sprzataniem kodu i koszyka -
        blad redisa przy sprzataniu nie cofa juz zlozonego zamowienia.
        """
        if self.cart.is_empty():
            self._transition(stage=CheckoutStage.DETAILS)
            raise EmptyCartError("Your cart is empty")

        draft = self.state.draft
        payload = OrderCreate(
            name=draft.name,
            email=draft.email,
            phone=draft.phone,
            address=draft.address,
            items=[
                OrderItemIn(id=i.id, name=i.name, price=i.price, quantity=i.quantity)
                for i in self.cart.items
            ],
            total=self.cart.total,
            payment_method=draft.payment_method.value,
        )

        try:
            order = self.order_service.create_order(payload)
        except PersistenceError:
            # koszyk i kod zostaja - klient moze ponowic bez skladania koszyka od nowa
            logger.error(f"Checkout {self.checkout_id}: order commit failed, cart preserved")
            raise

        self._transition(stage=CheckoutStage.SUCCESS, order_id=order.id)
        logger.info(f"Checkout {self.checkout_id}: order {order.id} placed")

        try:
            self.otp_service.discard(self.checkout_id)
            self.cart.clear()
        except (RedisError, OSError) as e:
            logger.error(f"Checkout {self.checkout_id}: order {order.id} placed but cleanup failed: {e}")

        return order.id

    def reset(self) -> CheckoutState:
        self.otp_service.discard(self.checkout_id)
        self.state_store.delete(self.checkout_id)
        self.state = CheckoutState(checkout_id=self.checkout_id)
        return self.state

    def snapshot(self) -> dict:
        draft = self.state.draft
        return {
            "checkout_id": self.checkout_id,
            "stage": self.stage,
            "email": draft.email if draft else None,
            "order_id": self.state.order_id,
            "total": draft.total if draft else None,
        }
