"""Payment gateway flow: create order, verify callback signature, fetch, refund"""

import uuid
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finquest.api.v1.schemas import (
    CreateOrderRequest,
    Envelope,
    OrderOut,
    RefundRequest,
    TransactionOut,
    VerifyPaymentRequest,
)
from finquest.api.dependencies import get_current_user, get_payment_client, get_request_id
from finquest.config import settings
from finquest.domain.exceptions import InvalidSignatureError
from finquest.domain.signature import verify_signature
from finquest.infrastructure.clients.payment_gateway import PaymentGatewayClient
from finquest.infrastructure.database.models import Transaction, User
from finquest.infrastructure.database.repositories import TransactionRepository
from finquest.infrastructure.database.session import get_db
from finquest.infrastructure.observability.logging import log_payment_event
from finquest.infrastructure.observability.metrics import payment_verification_counter

router = APIRouter()


def _owned_payment(db: Session, payment_id: str, user: User) -> Transaction:
    transaction = TransactionRepository(db).get_by_payment_id(payment_id, user.id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return transaction


@router.post("/payments/orders", response_model=Envelope[OrderOut], status_code=201)
async def create_order(
    body: CreateOrderRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: PaymentGatewayClient = Depends(get_payment_client),
):
    """
    Open a gateway order and record a pending transaction against it.

    Flow:
    1. Create the order at the gateway (hard deadline, no retries)
    2. Persist a pending transaction keyed by the gateway order id
    3. Return what the checkout widget needs to collect payment
    """
    request_id = get_request_id(request)
    receipt = f"rcpt_{uuid.uuid4().hex[:16]}"

    result = await gateway.create_order(
        amount=body.amount,
        currency=settings.currency,
        receipt=receipt,
        notes={"user_id": str(user.id), "category": body.category},
    )
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)

    order = result.data
    transaction = TransactionRepository(db).create(
        user.id,
        order_id=order["id"],
        amount=body.amount,
        currency=settings.currency,
        status="pending",
        description=body.description,
        category=body.category,
        merchant=body.merchant,
        payment_method=body.payment_method,
        payment_metadata=body.metadata.model_dump(exclude_none=True) if body.metadata else None,
        notes=body.notes,
    )
    db.commit()

    log_payment_event(request_id, str(user.id), "order_created", order["id"], receipt=receipt)

    return Envelope(
        data=OrderOut(
            order_id=order["id"],
            transaction_id=str(transaction.id),
            amount=order.get("amount", 0),
            currency=order.get("currency", settings.currency),
            key_id=settings.gateway_key_id,
        )
    )


@router.post("/payments/verify", response_model=Envelope[TransactionOut])
def verify_payment(
    body: VerifyPaymentRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Complete a pending transaction once the gateway signature checks out.

    A bad signature fails the transaction; replaying a verified callback
    returns the completed transaction unchanged.
    """
    request_id = get_request_id(request)
    transaction_repo = TransactionRepository(db)

    transaction = transaction_repo.get_by_order_id(body.order_id, user.id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Order not found")

    if transaction.status == "completed" and transaction.payment_id == body.payment_id:
        return Envelope(message="Payment already verified", data=TransactionOut.from_row(transaction))
    if transaction.status != "pending":
        raise HTTPException(status_code=409, detail=f"Transaction is already {transaction.status}")

    try:
        if not verify_signature(body.order_id, body.payment_id, body.signature, settings.gateway_key_secret):
            raise InvalidSignatureError(f"Signature mismatch for order {body.order_id}")

        # payment_id is unique across all users' transactions
        claimed = transaction_repo.get_by_payment_id(body.payment_id)
        if claimed is not None and claimed.id != transaction.id:
            log_payment_event(request_id, str(user.id), "duplicate_payment", body.order_id, payment_id=body.payment_id)
            raise HTTPException(status_code=409, detail="Payment already recorded for another order")

        transaction_repo.mark_completed(transaction, body.payment_id, body.signature)
        db.commit()

    except InvalidSignatureError as e:
        payment_verification_counter.labels(result="invalid").inc()
        transaction_repo.mark_failed(transaction)
        db.commit()
        log_payment_event(request_id, str(user.id), "rejected", body.order_id, reason=str(e))
        raise HTTPException(status_code=400, detail="Invalid payment signature")

    payment_verification_counter.labels(result="valid").inc()
    log_payment_event(request_id, str(user.id), "verified", body.order_id, payment_id=body.payment_id)

    return Envelope(message="Payment verified successfully", data=TransactionOut.from_row(transaction))


@router.get("/payments/{payment_id}", response_model=Envelope[dict])
async def get_payment(
    payment_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: PaymentGatewayClient = Depends(get_payment_client),
):
    """Live payment details from the gateway for one of the user's payments"""
    _owned_payment(db, payment_id, user)

    result = await gateway.fetch_payment(payment_id)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)
    return Envelope(data=result.data)


@router.post("/payments/{payment_id}/refund", response_model=Envelope[dict])
async def refund_payment(
    payment_id: str,
    body: RefundRequest,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: PaymentGatewayClient = Depends(get_payment_client),
):
    """
    Refund a completed payment.

    Partial refunds accumulate; once the refunded total reaches the payment
    amount the transaction is cancelled. Omitting the amount refunds whatever
    remains.
    """
    transaction = _owned_payment(db, payment_id, user)
    if transaction.status != "completed":
        raise HTTPException(status_code=409, detail=f"Cannot refund a {transaction.status} payment")

    already_refunded = (transaction.payment_metadata or {}).get("refunded_amount", 0)
    remaining = round(transaction.amount - already_refunded, 2)
    if body.amount is not None and body.amount > remaining:
        raise HTTPException(status_code=400, detail="Refund exceeds payment amount")

    refund_amount = body.amount if body.amount is not None else remaining
    # Full refund of an untouched payment lets the gateway pick the amount
    gateway_amount = refund_amount if body.amount is not None or already_refunded else None

    result = await gateway.refund(payment_id, amount=gateway_amount, notes=body.notes)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)

    TransactionRepository(db).record_refund(transaction, refund_amount)
    db.commit()

    log_payment_event(
        get_request_id(request), str(user.id), "refunded", transaction.order_id or "",
        payment_id=payment_id, refund_id=result.data.get("id"),
    )
    return Envelope(message="Refund initiated", data=result.data)
