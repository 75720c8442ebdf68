"""HTTP adapter for the eSewa transaction status API, with retry."""

from __future__ import annotations

import time
from decimal import Decimal

import requests
import structlog

from bookstore.domain.exceptions import GatewayError
from bookstore.domain.gateway.payment_gateway import GatewayStatus, GatewayStatusReport, PaymentGateway
from bookstore.domain.service.payment_signature import format_amount, parse_amount

logger = structlog.get_logger(__name__)


class EsewaGateway(PaymentGateway):

    def __init__(
        self,
        status_url: str,
        max_retries: int = 3,
        backoff: float = 0.5,
        timeout: float = 15,
    ) -> None:
        self.status_url = status_url
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self.max_retries = max_retries
        self.backoff = backoff
        self.timeout = timeout

    def fetch_status(
        self,
        transaction_uuid: str,
        total_amount: Decimal,
        product_code: str,
    ) -> GatewayStatusReport:
        params = {
            "product_code": product_code,
            "total_amount": format_amount(total_amount),
            "transaction_uuid": transaction_uuid,
        }
        body = self._request(params)

        amount = body.get("total_amount")
        return GatewayStatusReport(
            transaction_uuid=str(body.get("transaction_uuid", transaction_uuid)),
            status=GatewayStatus.parse(body.get("status")),
            total_amount=parse_amount(amount) if amount is not None else None,
            reference=body.get("ref_id"),
        )

    def _request(self, params: dict) -> dict:
        """GET the status endpoint, retrying server errors and timeouts.

        Raises GatewayError on persistent failure or a non-retryable answer.
        """
        for attempt in range(self.max_retries):
            try:
                resp = self.session.get(self.status_url, params=params, timeout=self.timeout)

                if resp.status_code == 200:
                    body = resp.json()
                    if not isinstance(body, dict):
                        raise GatewayError("Payment gateway returned an unexpected response")
                    return body

                if resp.status_code >= 500:
                    wait = self.backoff * 2 ** attempt
                    logger.warning("Gateway server error, retrying", status_code=resp.status_code, wait=wait)
                    time.sleep(wait)
                    continue

                raise GatewayError(f"Payment gateway rejected the status query (HTTP {resp.status_code})")

            except (requests.exceptions.RequestException, ValueError) as exc:
                if attempt == self.max_retries - 1:
                    raise GatewayError("Payment gateway is unreachable") from exc
                wait = self.backoff * 2 ** attempt
                logger.warning("Gateway request failed, retrying", error=str(exc), wait=wait)
                time.sleep(wait)

        raise GatewayError(f"Payment gateway still failing after {self.max_retries} attempts")

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> EsewaGateway:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
