"""End-to-end tests for the click CLI against a temporary data directory."""

from decimal import Decimal
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from bookstore.domain.gateway.payment_gateway import GatewayStatus, GatewayStatusReport
from bookstore.domain.service.payment_signature import build_message, encode_callback, sign
from bookstore.infrastructure import bootstrap
from bookstore.infrastructure.cli.main import cli
from bookstore.infrastructure.config import ESEWA_TEST_SECRET
from bookstore.infrastructure.gateway.esewa_gateway import EsewaGateway

ADDRESS_ARGS = [
    "--full-name", "Sita Sharma",
    "--phone", "9800000000",
    "--address", "Lazimpat 12",
    "--city", "Kathmandu",
    "--state", "Bagmati",
    "--zip", "44600",
]


@pytest.fixture(autouse=True)
def data_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("BOOKSTORE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("BOOKSTORE_USER", "u1")
    monkeypatch.chdir(tmp_path)
    bootstrap.settings.cache_clear()
    yield tmp_path
    bootstrap.settings.cache_clear()


@pytest.fixture
def runner():
    return CliRunner()


def _invoke(runner, *args):
    return runner.invoke(cli, list(args), catch_exceptions=False)


def _stock_book(runner, stock="10"):
    result = _invoke(
        runner, "book", "add", "--title", "Muna Madan", "--author", "Devkota",
        "--price", "20", "--stock", stock,
    )
    assert result.exit_code == 0, result.output


def _place_order(runner, method):
    _stock_book(runner)
    assert _invoke(runner, "cart", "add", "--book", "1", "--quantity", "3").exit_code == 0
    result = _invoke(runner, "order", "create", "--payment-method", method, *ADDRESS_ARGS)
    assert result.exit_code == 0, result.output
    return result


class TestBookCommands:

    def test_add_and_list(self, runner):
        result = _invoke(
            runner, "book", "add", "--title", "Muna Madan", "--author", "Devkota",
            "--price", "450.50", "--stock", "4",
        )
        assert "Book #1 'Muna Madan' added at Rs. 450.50 (4 in stock)" in result.output

        result = _invoke(runner, "book", "list")
        assert "Muna Madan" in result.output
        assert "Rs. 450.50" in result.output

    def test_update(self, runner):
        _stock_book(runner)
        result = _invoke(runner, "book", "update", "--id", "1", "--stock", "2")
        assert "Book #1 updated: Rs. 20.00, 2 in stock" in result.output

    def test_empty_catalog(self, runner):
        assert "No books found." in _invoke(runner, "book", "list").output

    def test_show_and_delete(self, runner):
        _stock_book(runner)
        shown = _invoke(runner, "book", "show", "--id", "1")
        assert "Book #1: Muna Madan by Devkota" in shown.output
        assert "Stock:    10" in shown.output

        assert "Book #1 'Muna Madan' deleted" in _invoke(runner, "book", "delete", "--id", "1").output
        assert "No books found." in _invoke(runner, "book", "list").output

        gone = _invoke(runner, "book", "show", "--id", "1")
        assert gone.exit_code == 1
        assert "[BOOK_NOT_FOUND]" in gone.output


class TestCartCommands:

    def test_add_show_clear(self, runner):
        _stock_book(runner)
        result = _invoke(runner, "cart", "add", "--book", "1", "--quantity", "2")
        assert "Rs. 40.00" in result.output

        assert "Rs. 40.00" in _invoke(runner, "cart", "show").output
        assert "Cart cleared." in _invoke(runner, "cart", "clear").output
        assert "Cart is empty." in _invoke(runner, "cart", "show").output

    def test_domain_error_rendered_with_code(self, runner):
        _stock_book(runner, stock="1")
        result = _invoke(runner, "cart", "add", "--book", "1", "--quantity", "2")
        assert result.exit_code == 1
        assert "[INSUFFICIENT_STOCK]" in result.output

    def test_user_is_required(self, runner, monkeypatch):
        monkeypatch.delenv("BOOKSTORE_USER")
        result = runner.invoke(cli, ["cart", "show"])
        assert result.exit_code == 2


class TestOrderCommands:

    def test_checkout_and_cancel(self, runner):
        result = _place_order(runner, "credit_card")
        assert "Order created successfully." in result.output
        assert "status=confirmed, payment=completed" in result.output
        assert "Rs. 64.80" in result.output
        assert "7" in _invoke(runner, "book", "list").output.splitlines()[-1]

        assert "Order #1 cancelled." in _invoke(runner, "order", "cancel", "--id", "1").output
        assert _invoke(runner, "book", "list").output.splitlines()[-1].endswith("10")

        again = _invoke(runner, "order", "cancel", "--id", "1")
        assert again.exit_code == 1
        assert "[INVALID_ORDER_STATUS]" in again.output

    def test_empty_cart(self, runner):
        result = _invoke(runner, "order", "create", "--payment-method", "paypal", *ADDRESS_ARGS)
        assert result.exit_code == 1
        assert "[EMPTY_CART]" in result.output

    def test_list_show_status_stats(self, runner):
        _place_order(runner, "cash_on_delivery")

        listing = _invoke(runner, "order", "list")
        assert "confirmed" in listing.output
        assert "Page 1 of 1 (1 orders)" in listing.output

        assert "payment=pending" in _invoke(runner, "order", "show", "--id", "1").output

        assert "is now shipped" in _invoke(runner, "order", "status", "--id", "1", "--status", "shipped").output
        bad = _invoke(runner, "order", "status", "--id", "1", "--status", "teleported")
        assert "[INVALID_STATUS]" in bad.output

        stats = _invoke(runner, "order", "stats")
        assert "Total orders:        1" in stats.output
        assert "Rs. 64.80" in stats.output

    def test_by_status_lists_every_user(self, runner):
        _place_order(runner, "paypal")
        _invoke(runner, "cart", "add", "--user", "u2", "--book", "1", "--quantity", "1")
        _invoke(runner, "order", "create", "--user", "u2", "--payment-method", "paypal", *ADDRESS_ARGS)

        result = _invoke(runner, "order", "by-status", "--status", "confirmed")
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("#2") and "u2" in lines[0]
        assert lines[1].startswith("#1") and "u1" in lines[1]
        assert "Page 1 of 1 (2 orders)" in result.output

        assert "No orders found." in _invoke(runner, "order", "by-status", "--status", "delivered").output

    def test_other_users_order_is_hidden(self, runner):
        _place_order(runner, "paypal")
        result = _invoke(runner, "order", "show", "--user", "u2", "--id", "1")
        assert "[ORDER_NOT_FOUND]" in result.output


class TestPaymentCommands:

    def test_initiate_and_verify(self, runner):
        result = _place_order(runner, "esewa")
        assert "status=pending, payment=pending" in result.output

        form = _invoke(runner, "payment", "initiate", "--id", "1")
        assert "total_amount=64.80" in form.output
        fields = dict(
            line.strip().split("=", 1) for line in form.output.splitlines() if line.startswith("  ")
        )

        callback = {
            "transaction_code": "000AWEO",
            "status": "COMPLETE",
            "total_amount": "64.80",
            "transaction_uuid": fields["transaction_uuid"],
            "product_code": "EPAYTEST",
            "signed_field_names": "total_amount,transaction_uuid,product_code",
        }
        callback["signature"] = sign(build_message(callback), ESEWA_TEST_SECRET)

        verified = _invoke(runner, "payment", "verify", "--data", encode_callback(callback))
        assert verified.exit_code == 0, verified.output
        assert "payment status: completed" in verified.output
        assert "Cart is empty." in _invoke(runner, "cart", "show").output

    def test_verify_rejects_forged_signature(self, runner):
        _place_order(runner, "esewa")
        callback = {
            "status": "COMPLETE",
            "total_amount": "64.80",
            "transaction_uuid": "ORD-ANY",
            "product_code": "EPAYTEST",
            "signature": "forged",
        }
        result = _invoke(runner, "payment", "verify", "--data", encode_callback(callback))
        assert result.exit_code == 1
        assert "[SIGNATURE_MISMATCH]" in result.output

    def test_check_status(self, runner):
        _place_order(runner, "esewa")
        report = GatewayStatusReport(
            transaction_uuid="ignored",
            status=GatewayStatus.COMPLETE,
            total_amount=Decimal("64.80"),
            reference="0001TS9",
        )
        with patch.object(EsewaGateway, "fetch_status", return_value=report):
            result = _invoke(runner, "payment", "check", "--id", "1")

        assert result.exit_code == 0, result.output
        assert "gateway=COMPLETE" in result.output
        assert "payment status: completed" in result.output
