from fastapi import APIRouter, Depends, Request

from api.auth import CurrentUser, verify_api_key
from api.dependencies import PaymentMethodsDep, PaymentServiceDep
from api.models.payments import (
    ConfirmBody,
    ConfirmResponse,
    MessageResponse,
    PaymentBody,
    PaymentMethodBody,
    PaymentMethodResponse,
    PaymentReceipt,
    PaymentResponse,
)
from api.rate_limit import PAYMENT_LIMIT, limiter

router = APIRouter()


@router.get("/history", response_model=list[PaymentResponse])
def get_payment_history(user_id: CurrentUser, payments: PaymentServiceDep) -> list[PaymentResponse]:
    """The user's payments, most recent first."""
    return [PaymentResponse.from_view(view) for view in payments.get_payment_history(user_id)]


@router.get("/methods", response_model=list[PaymentMethodResponse])
def list_payment_methods(
    user_id: CurrentUser, methods: PaymentMethodsDep
) -> list[PaymentMethodResponse]:
    return [PaymentMethodResponse.from_method(m) for m in methods.list_methods(user_id)]


@router.post("/methods", response_model=PaymentMethodResponse, status_code=201)
@limiter.limit(PAYMENT_LIMIT)
def add_payment_method(
    request: Request, body: PaymentMethodBody, user_id: CurrentUser, methods: PaymentMethodsDep
) -> PaymentMethodResponse:
    """Save a card; only its last four digits are kept."""
    method = methods.add_method(
        user_id,
        body.type,
        body.card_number,
        body.expiry_month,
        body.expiry_year,
        body.cvv,
        make_default=body.is_default,
    )
    return PaymentMethodResponse.from_method(method)


@router.delete("/methods/{method_id}", response_model=MessageResponse)
def remove_payment_method(
    method_id: str, user_id: CurrentUser, methods: PaymentMethodsDep
) -> MessageResponse:
    methods.remove_method(user_id, method_id)
    return MessageResponse(message="Payment method removed successfully")


@router.post("/{ride_id}", response_model=PaymentReceipt)
@limiter.limit(PAYMENT_LIMIT)
def process_payment(
    request: Request,
    ride_id: str,
    body: PaymentBody,
    user_id: CurrentUser,
    payments: PaymentServiceDep,
) -> PaymentReceipt:
    """Pay for a ride and complete it."""
    payment = payments.process_payment(ride_id, user_id, body.method, body.amount)
    return PaymentReceipt.from_payment(payment)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment_details(
    payment_id: str, user_id: CurrentUser, payments: PaymentServiceDep
) -> PaymentResponse:
    return PaymentResponse.from_view(payments.get_payment_details(payment_id, user_id))


@router.post(
    "/{payment_id}/confirm",
    response_model=ConfirmResponse,
    dependencies=[Depends(verify_api_key)],
)
@limiter.limit(PAYMENT_LIMIT)
def confirm_payment(
    request: Request, payment_id: str, body: ConfirmBody, payments: PaymentServiceDep
) -> ConfirmResponse:
    """Payment provider webhook; authenticated with the service API key."""
    payment = payments.confirm_payment(payment_id, body.status)
    return ConfirmResponse(
        payment_id=payment.payment_id,
        status=payment.status.value,
        updated_at=payment.updated_at,
    )
