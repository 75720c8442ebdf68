"""Application service: Initiate Payment use case.

Builds the signed form the client posts to the gateway's hosted payment
page. The order number doubles as the gateway's transaction uuid.
"""

from __future__ import annotations

from bookstore.application.dto import PaymentFormDTO
from bookstore.domain.exceptions import InvalidStateError, OrderNotFoundError, ValidationError
from bookstore.domain.gateway.payment_gateway import GatewayCredentials
from bookstore.domain.model.order import OrderStatus, PaymentStatus
from bookstore.domain.repository.order_repository import OrderRepository
from bookstore.domain.service.payment_signature import DEFAULT_SIGNED_FIELDS, build_message, format_amount, sign


class InitiatePaymentHandler:

    def __init__(self, order_repo: OrderRepository, credentials: GatewayCredentials) -> None:
        self._order_repo = order_repo
        self._credentials = credentials

    def handle(self, order_id: int, user_id: str) -> PaymentFormDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None or order.user_id != user_id:
            raise OrderNotFoundError(f"Order #{order_id} not found")
        if not order.payment_method.uses_gateway:
            raise ValidationError(f"Order {order.order_number} is not paid through the payment gateway")
        if order.payment_status is not PaymentStatus.PENDING or order.status is OrderStatus.CANCELLED:
            raise InvalidStateError(f"Order {order.order_number} is not awaiting payment")

        fields = {
            "amount": format_amount(order.costs.subtotal.amount),
            "tax_amount": format_amount(order.costs.tax.amount),
            "product_service_charge": "0.00",
            "product_delivery_charge": format_amount(order.costs.shipping_cost.amount),
            "total_amount": format_amount(order.costs.total.amount),
            "transaction_uuid": order.order_number,
            "product_code": self._credentials.product_code,
            "success_url": self._credentials.success_url,
            "failure_url": self._credentials.failure_url,
            "signed_field_names": ",".join(DEFAULT_SIGNED_FIELDS),
        }
        fields["signature"] = sign(build_message(fields), self._credentials.secret_key)
        return PaymentFormDTO(form_url=self._credentials.form_url, fields=fields)
