"""Integration tests for the gateway payment use cases.

Callbacks are built and signed the same way the gateway does, then fed
through the handlers against in-memory repositories.
"""

from decimal import Decimal

import pytest

from bookstore.application.add_cart_item import AddCartItemHandler
from bookstore.application.cancel_order import CancelOrderHandler
from bookstore.application.check_payment_status import CheckPaymentStatusHandler
from bookstore.application.create_order import CreateOrderHandler
from bookstore.application.initiate_payment import InitiatePaymentHandler
from bookstore.application.verify_payment import VerifyPaymentHandler
from bookstore.domain.exceptions import (
    AmountMismatchError,
    InsufficientStockError,
    InvalidStateError,
    OrderNotFoundError,
    SignatureMismatchError,
    ValidationError,
)
from bookstore.domain.gateway.payment_gateway import GatewayCredentials, GatewayStatus
from bookstore.domain.model.book import Book
from bookstore.domain.model.order import OrderStatus, PaymentStatus
from bookstore.domain.model.value_objects import Money, ShippingAddress
from bookstore.domain.service.payment_signature import (
    build_message,
    decode_callback,
    encode_callback,
    sign,
)
from tests.fakes import (
    FakeBookRepository,
    FakeCartRepository,
    FakeOrderRepository,
    FakePaymentGateway,
)

SECRET = "8gBm/:&EnhH.1/q"
CREDENTIALS = GatewayCredentials(
    secret_key=SECRET,
    product_code="EPAYTEST",
    form_url="https://rc-epay.esewa.com.np/api/epay/main/v2/form",
    success_url="http://localhost/payment/success",
    failure_url="http://localhost/payment/failure",
)
CALLBACK_FIELDS = "transaction_code,status,total_amount,transaction_uuid,product_code,signed_field_names"
ADDRESS = ShippingAddress(
    full_name="Sita Sharma",
    phone_number="9800000000",
    address="Lazimpat 12",
    city="Kathmandu",
    state="Bagmati",
    zip_code="44600",
)


def _setup(method="esewa"):
    """Three copies of a 20.00 book -> subtotal 60.00, tax 4.80, total 64.80."""
    books = FakeBookRepository([
        Book(id="1", title="Muna Madan", author="Devkota", price=Money.of("20.00"), stock=10),
    ])
    carts = FakeCartRepository()
    orders = FakeOrderRepository()
    AddCartItemHandler(carts, books).handle("u1", "1", 3)
    dto = CreateOrderHandler(orders, carts, books).handle("u1", ADDRESS, method)
    return orders.get_by_id(dto.id), orders, carts, books


def _callback(order_number, status="COMPLETE", total_amount="64.80", secret=SECRET, **overrides):
    payload = {
        "transaction_code": "000AWEO",
        "status": status,
        "total_amount": total_amount,
        "transaction_uuid": order_number,
        "product_code": "EPAYTEST",
        "signed_field_names": CALLBACK_FIELDS,
    }
    payload["signature"] = sign(build_message(payload, CALLBACK_FIELDS.split(",")), secret)
    payload.update(overrides)
    return encode_callback(payload)


class TestInitiatePayment:

    def test_signed_form_fields(self):
        order, orders, _, _ = _setup()
        form = InitiatePaymentHandler(orders, CREDENTIALS).handle(order.id, "u1")

        assert form.form_url == CREDENTIALS.form_url
        assert form.fields["amount"] == "60.00"
        assert form.fields["tax_amount"] == "4.80"
        assert form.fields["total_amount"] == "64.80"
        assert form.fields["transaction_uuid"] == order.order_number
        assert form.fields["signed_field_names"] == "total_amount,transaction_uuid,product_code"
        message = f"total_amount=64.80,transaction_uuid={order.order_number},product_code=EPAYTEST"
        assert form.fields["signature"] == sign(message, SECRET)

    def test_direct_payment_order_rejected(self):
        order, orders, _, _ = _setup(method="paypal")
        with pytest.raises(ValidationError):
            InitiatePaymentHandler(orders, CREDENTIALS).handle(order.id, "u1")

    def test_paid_order_rejected(self):
        order, orders, carts, books = _setup()
        VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(_callback(order.order_number))
        with pytest.raises(InvalidStateError):
            InitiatePaymentHandler(orders, CREDENTIALS).handle(order.id, "u1")

    def test_other_users_order(self):
        order, orders, _, _ = _setup()
        with pytest.raises(OrderNotFoundError):
            InitiatePaymentHandler(orders, CREDENTIALS).handle(order.id, "u2")


class TestVerifyPayment:

    def test_complete_settles_order(self):
        order, orders, carts, books = _setup()
        result = VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(
            _callback(order.order_number)
        )

        assert result.verified
        assert result.changed
        assert result.order_status == "confirmed"
        saved = orders.get_by_id(order.id)
        assert saved.payment_status is PaymentStatus.COMPLETED
        assert saved.payment_reference == "000AWEO"
        assert saved.stock_debited
        assert books.get_by_id("1").stock == 7
        assert carts.get_by_user("u1").is_empty

    def test_replayed_callback_is_a_no_op(self):
        order, orders, carts, books = _setup()
        handler = VerifyPaymentHandler(orders, carts, books, CREDENTIALS)
        handler.handle(_callback(order.order_number))

        result = handler.handle(_callback(order.order_number))

        assert result.verified
        assert not result.changed
        assert books.get_by_id("1").stock == 7

    def test_amount_mismatch(self):
        order, orders, carts, books = _setup()
        payload = _callback(order.order_number, total_amount="10.00")

        with pytest.raises(AmountMismatchError):
            VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(payload)

        saved = orders.get_by_id(order.id)
        assert saved.status is OrderStatus.PENDING
        assert saved.payment_status is PaymentStatus.PENDING
        assert books.get_by_id("1").stock == 10

    def test_amount_with_thousands_separator(self):
        order, orders, carts, books = _setup()
        payload = _callback(order.order_number, total_amount="0,064.80")
        assert VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(payload).verified

    def test_tampered_payload(self):
        order, orders, carts, books = _setup()
        signed = decode_callback(_callback(order.order_number)).fields
        tampered = encode_callback({**signed, "total_amount": "1.00"})

        with pytest.raises(SignatureMismatchError):
            VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(tampered)
        assert books.get_by_id("1").stock == 10

    def test_wrong_secret(self):
        order, orders, carts, books = _setup()
        with pytest.raises(SignatureMismatchError):
            VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(
                _callback(order.order_number, secret="not-the-secret")
            )

    def test_wrong_product_code(self):
        order, orders, carts, books = _setup()
        other = GatewayCredentials(secret_key=SECRET, product_code="OTHER")
        with pytest.raises(ValidationError, match="product code"):
            VerifyPaymentHandler(orders, carts, books, other).handle(_callback(order.order_number))

    def test_unknown_order(self):
        _, orders, carts, books = _setup()
        with pytest.raises(OrderNotFoundError):
            VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(_callback("ORD-NOPE-00000"))

    def test_malformed_payload(self):
        _, orders, carts, books = _setup()
        with pytest.raises(ValidationError):
            VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle("not base64 at all!")

    def test_failed_payment_cancels_order(self):
        order, orders, carts, books = _setup()
        result = VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(
            _callback(order.order_number, status="FAILED")
        )

        assert not result.verified
        assert result.order_status == "cancelled"
        assert result.payment_status == "failed"
        assert books.get_by_id("1").stock == 10
        assert not carts.get_by_user("u1").is_empty

    def test_pending_changes_nothing(self):
        order, orders, carts, books = _setup()
        result = VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(
            _callback(order.order_number, status="PENDING")
        )
        assert not result.changed
        assert result.order_status == "pending"

    def test_unrecognised_status(self):
        order, orders, carts, books = _setup()
        result = VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(
            _callback(order.order_number, status="SOMETHING_NEW")
        )
        assert result.gateway_status == "UNKNOWN"
        assert not result.verified
        assert not result.changed
        assert orders.get_by_id(order.id).payment_status is PaymentStatus.PENDING

    def test_failure_after_completion_rejected(self):
        order, orders, carts, books = _setup()
        handler = VerifyPaymentHandler(orders, carts, books, CREDENTIALS)
        handler.handle(_callback(order.order_number))
        with pytest.raises(InvalidStateError):
            handler.handle(_callback(order.order_number, status="FAILED"))

    def test_stock_gone_before_payment_lands(self):
        order, orders, carts, books = _setup()
        books.get_by_id("1").set_stock(2)

        with pytest.raises(InsufficientStockError):
            VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(
                _callback(order.order_number)
            )

        saved = orders.get_by_id(order.id)
        assert saved.payment_status is PaymentStatus.PENDING
        assert saved.status is OrderStatus.PENDING
        assert not saved.stock_debited
        assert books.get_by_id("1").stock == 2


    def test_payment_after_cancellation_is_kept_for_refund(self):
        order, orders, carts, books = _setup()
        CancelOrderHandler(orders, books).handle(order.id, "u1")

        result = VerifyPaymentHandler(orders, carts, books, CREDENTIALS).handle(
            _callback(order.order_number)
        )

        assert result.changed
        assert not result.verified
        assert result.order_status == "cancelled"
        assert result.payment_status == "completed"
        saved = orders.get_by_id(order.id)
        assert saved.payment_reference == "000AWEO"
        assert not saved.stock_debited
        assert books.get_by_id("1").stock == 10
        assert not carts.get_by_user("u1").is_empty

class TestCheckPaymentStatus:

    def test_gateway_reports_completion(self):
        order, orders, carts, books = _setup()
        gateway = FakePaymentGateway(GatewayStatus.COMPLETE, reference="REF-9")

        result = CheckPaymentStatusHandler(orders, carts, books, gateway, CREDENTIALS).handle(order.id)

        assert result.changed
        assert result.verified
        assert gateway.calls == [{
            "transaction_uuid": order.order_number,
            "total_amount": Decimal("64.80"),
            "product_code": "EPAYTEST",
        }]
        assert orders.get_by_id(order.id).payment_reference == "REF-9"
        assert books.get_by_id("1").stock == 7

    def test_agreeing_status_changes_nothing(self):
        order, orders, carts, books = _setup()
        handler = CheckPaymentStatusHandler(
            orders, carts, books, FakePaymentGateway(GatewayStatus.COMPLETE), CREDENTIALS
        )
        handler.handle(order.id)
        assert not handler.handle(order.id).changed
        assert books.get_by_id("1").stock == 7

    @pytest.mark.parametrize("status", [GatewayStatus.PENDING, GatewayStatus.AMBIGUOUS, GatewayStatus.UNKNOWN])
    def test_undecided_statuses(self, status):
        order, orders, carts, books = _setup()
        result = CheckPaymentStatusHandler(
            orders, carts, books, FakePaymentGateway(status), CREDENTIALS
        ).handle(order.id)
        assert not result.changed
        assert result.order_status == "pending"

    def test_canceled_at_gateway(self):
        order, orders, carts, books = _setup()
        result = CheckPaymentStatusHandler(
            orders, carts, books, FakePaymentGateway(GatewayStatus.CANCELED), CREDENTIALS
        ).handle(order.id)
        assert result.changed
        assert result.order_status == "cancelled"
        assert result.payment_status == "failed"

    def test_completion_reported_for_cancelled_order(self):
        order, orders, carts, books = _setup()
        CancelOrderHandler(orders, books).handle(order.id, "u1")
        handler = CheckPaymentStatusHandler(
            orders, carts, books, FakePaymentGateway(GatewayStatus.COMPLETE), CREDENTIALS
        )

        result = handler.handle(order.id)

        assert result.changed
        assert not result.verified
        assert result.order_status == "cancelled"
        assert books.get_by_id("1").stock == 10
        assert not carts.get_by_user("u1").is_empty
        assert not handler.handle(order.id).changed

    def test_direct_payment_order_rejected(self):
        order, orders, carts, books = _setup(method="cash_on_delivery")
        gateway = FakePaymentGateway()
        with pytest.raises(ValidationError):
            CheckPaymentStatusHandler(orders, carts, books, gateway, CREDENTIALS).handle(order.id)
        assert gateway.calls == []
