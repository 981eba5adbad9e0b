"""Payment gateway callback signature verification"""

import hashlib
import hmac


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 hex digest of "order_id|payment_id" keyed by the gateway secret"""
    body = f"{order_id}|{payment_id}"
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """
    Check that a payment callback was signed by the gateway.

    The whole digest must match; a prefix or case-folded match is rejected.
    """
    if not signature:
        return False
    expected = compute_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
