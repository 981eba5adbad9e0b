"""Payment gateway HTTP client for orders, payment lookups and refunds"""

import asyncio
import logging
import time
import httpx
from typing import Any, Dict, Optional
from finquest.domain.models import GatewayResult
from finquest.config import settings
from finquest.infrastructure.observability.metrics import gateway_failures_counter, gateway_latency_histogram


def to_minor_units(amount: float) -> int:
    """Gateway amounts are integers in the smallest currency unit (paise)"""
    return int(round(amount * 100))


def _upstream_message(response: httpx.Response) -> str:
    try:
        body = response.json()
        description = body.get("error", {}).get("description")
    except (ValueError, AttributeError):
        description = None
    return description or f"Payment gateway error: {response.status_code}"


class PaymentGatewayClient:
    """
    Client for the external payment gateway (Razorpay-compatible REST API).

    Every call returns a GatewayResult; timeouts and upstream errors are
    reported as failed results and never raised to the caller.
    """

    def __init__(
        self,
        base_url: str | None = None,
        key_id: str | None = None,
        key_secret: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.gateway_api_base
        self.key_id = key_id if key_id is not None else settings.gateway_key_id
        self.key_secret = key_secret if key_secret is not None else settings.gateway_key_secret
        self.timeout = timeout or settings.gateway_timeout_seconds
        self.transport = transport

    async def create_order(
        self,
        amount: float,
        currency: str,
        receipt: str,
        notes: Optional[Dict[str, Any]] = None,
    ) -> GatewayResult:
        """Create an auto-capture order; amount is in major units"""
        payload = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
            "payment_capture": 1,
        }
        return await self._call("create_order", "POST", "/orders", payload)

    async def fetch_payment(self, payment_id: str) -> GatewayResult:
        return await self._call("fetch_payment", "GET", f"/payments/{payment_id}")

    async def refund(
        self,
        payment_id: str,
        amount: Optional[float] = None,
        notes: Optional[Dict[str, Any]] = None,
    ) -> GatewayResult:
        """Refund a captured payment; full refund when amount is omitted"""
        payload: Dict[str, Any] = {}
        if amount:
            payload["amount"] = to_minor_units(amount)
        if notes:
            payload["notes"] = notes
        return await self._call("refund", "POST", f"/payments/{payment_id}/refund", payload)

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> GatewayResult:
        start_time = time.time()
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                # Hard deadline over the whole exchange, not just each socket phase
                response = await asyncio.wait_for(
                    client.request(method, path, json=payload),
                    timeout=self.timeout,
                )
                response.raise_for_status()
                return GatewayResult(success=True, data=response.json())

        except (httpx.TimeoutException, asyncio.TimeoutError):
            error = f"Payment gateway timeout after {self.timeout}s"
        except httpx.HTTPStatusError as e:
            error = _upstream_message(e.response)
        except httpx.RequestError as e:
            error = f"Payment gateway unreachable: {e}"
        except ValueError as e:
            error = f"Invalid response from payment gateway: {e}"
        finally:
            gateway_latency_histogram.labels(operation=operation).observe(time.time() - start_time)

        gateway_failures_counter.labels(operation=operation).inc()
        logging.error(f"Payment gateway {operation} failed: {error}", extra={"operation": operation})
        return GatewayResult(success=False, error=error)
