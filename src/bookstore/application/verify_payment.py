"""Application service: Verify Payment use case.

Reconciles the gateway's signed callback against the pending order:

1. decode the base64 payload
2. recompute and compare the signature
3. compare the paid amount with the order total
4. hand the gateway status to the settlement service
"""

from __future__ import annotations

import structlog

from bookstore.application.dto import PaymentVerificationDTO, verification_to_dto
from bookstore.domain.exceptions import AmountMismatchError, OrderNotFoundError, ValidationError
from bookstore.domain.gateway.payment_gateway import GatewayCredentials, GatewayStatus
from bookstore.domain.model.value_objects import CENT
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.cart_repository import CartRepository
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.payment_settlement_service import PaymentSettlementService
from bookstore.domain.service.payment_signature import decode_callback, verify_signature

logger = structlog.get_logger(__name__)


class VerifyPaymentHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        book_repo: BookRepository,
        credentials: GatewayCredentials,
    ) -> None:
        self._order_repo = order_repo
        self._credentials = credentials
        self._settlement = PaymentSettlementService(order_repo, cart_repo, book_repo)

    def handle(self, encoded_payload: str) -> PaymentVerificationDTO:
        callback = decode_callback(encoded_payload)
        verify_signature(callback, self._credentials.secret_key)

        if callback.product_code and callback.product_code != self._credentials.product_code:
            raise ValidationError(f"Unexpected product code {callback.product_code!r}")

        order = self._order_repo.get_by_order_number(callback.transaction_uuid)
        if order is None:
            raise OrderNotFoundError(f"Order {callback.transaction_uuid} not found")

        expected = order.total.amount.quantize(CENT)
        if callback.total_amount.quantize(CENT) != expected:
            logger.warning(
                "Payment amount mismatch",
                order_number=order.order_number,
                expected=str(expected),
                received=str(callback.total_amount),
            )
            raise AmountMismatchError(expected, callback.total_amount)

        status = GatewayStatus.parse(callback.status)
        changed = self._settlement.settle(order, status, callback.transaction_code)

        return verification_to_dto(order, status.value, changed)
