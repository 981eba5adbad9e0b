"""Local stand-in for the payment gateway: orders, simulated checkout, payments, refunds"""

import os
import uuid
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Dict, Optional

from finquest.domain.signature import compute_signature

app = FastAPI(title="Mock Payment Gateway", version="1.0.0")
KEY_SECRET = os.getenv("GATEWAY_KEY_SECRET", "mock_secret")

ORDERS: Dict[str, dict] = {}
PAYMENTS: Dict[str, dict] = {}


class OrderRequest(BaseModel):
    amount: int
    currency: str = "INR"
    receipt: str
    notes: Dict[str, str] = {}
    payment_capture: int = 1


class RefundRequest(BaseModel):
    amount: Optional[int] = None
    notes: Dict[str, str] = {}


def _not_found(kind: str) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"error": {"code": "BAD_REQUEST_ERROR", "description": f"The id provided does not exist ({kind})"}},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/v1/orders")
def create_order(body: OrderRequest):
    order_id = f"order_{uuid.uuid4().hex[:14]}"
    ORDERS[order_id] = {"id": order_id, "entity": "order", "status": "created", **body.model_dump()}
    return ORDERS[order_id]


@app.post("/mock/checkout/{order_id}")
def checkout(order_id: str):
    """Pay an order the way the checkout widget would, returning the signed callback fields"""
    order = ORDERS.get(order_id)
    if order is None:
        raise _not_found("order")
    payment_id = f"pay_{uuid.uuid4().hex[:14]}"
    PAYMENTS[payment_id] = {
        "id": payment_id,
        "entity": "payment",
        "order_id": order_id,
        "amount": order["amount"],
        "currency": order["currency"],
        "status": "captured",
        "amount_refunded": 0,
    }
    order["status"] = "paid"
    return {
        "order_id": order_id,
        "payment_id": payment_id,
        "signature": compute_signature(order_id, payment_id, KEY_SECRET),
    }


@app.get("/v1/payments/{payment_id}")
def fetch_payment(payment_id: str):
    if payment_id not in PAYMENTS:
        raise _not_found("payment")
    return PAYMENTS[payment_id]


@app.post("/v1/payments/{payment_id}/refund")
def refund(payment_id: str, body: RefundRequest):
    payment = PAYMENTS.get(payment_id)
    if payment is None:
        raise _not_found("payment")
    amount = body.amount or payment["amount"] - payment["amount_refunded"]
    payment["amount_refunded"] += amount
    if payment["amount_refunded"] >= payment["amount"]:
        payment["status"] = "refunded"
    return {"id": f"rfnd_{uuid.uuid4().hex[:14]}", "entity": "refund", "payment_id": payment_id, "amount": amount}
