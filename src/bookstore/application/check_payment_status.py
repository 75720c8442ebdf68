"""Application service: Check Payment Status use case.

Out-of-band reconciliation: asks the gateway what it knows about an order's
transaction and applies the verdict only when it disagrees with what is
stored.
"""

from __future__ import annotations

import structlog

from bookstore.application.dto import PaymentVerificationDTO, verification_to_dto
from bookstore.domain.exceptions import OrderNotFoundError, ValidationError
from bookstore.domain.gateway.payment_gateway import GatewayCredentials, GatewayStatus, PaymentGateway
from bookstore.domain.model.order import PaymentStatus
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.cart_repository import CartRepository
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.payment_settlement_service import PaymentSettlementService

logger = structlog.get_logger(__name__)

_EXPECTED_PAYMENT_STATUS: dict[GatewayStatus, PaymentStatus] = {
    GatewayStatus.COMPLETE: PaymentStatus.COMPLETED,
    GatewayStatus.PENDING: PaymentStatus.PENDING,
    GatewayStatus.AMBIGUOUS: PaymentStatus.PENDING,
    GatewayStatus.FAILED: PaymentStatus.FAILED,
    GatewayStatus.CANCELED: PaymentStatus.FAILED,
}


class CheckPaymentStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        book_repo: BookRepository,
        gateway: PaymentGateway,
        credentials: GatewayCredentials,
    ) -> None:
        self._order_repo = order_repo
        self._gateway = gateway
        self._credentials = credentials
        self._settlement = PaymentSettlementService(order_repo, cart_repo, book_repo)

    def handle(self, order_id: int) -> PaymentVerificationDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order #{order_id} not found")
        if not order.payment_method.uses_gateway:
            raise ValidationError(f"Order {order.order_number} is not paid through the payment gateway")

        report = self._gateway.fetch_status(
            order.order_number,
            order.total.amount,
            self._credentials.product_code,
        )

        changed = False
        expected = _EXPECTED_PAYMENT_STATUS.get(report.status)
        if expected is not None and expected is not order.payment_status:
            changed = self._settlement.settle(order, report.status, report.reference)
        elif expected is None:
            logger.warning(
                "Gateway returned an unrecognised status",
                order_number=order.order_number,
                status=report.status.value,
            )

        return verification_to_dto(order, report.status.value, changed)
