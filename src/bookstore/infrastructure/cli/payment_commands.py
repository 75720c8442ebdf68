"""CLI commands for gateway payments."""

from __future__ import annotations

import click

from bookstore.application.check_payment_status import CheckPaymentStatusHandler
from bookstore.application.dto import PaymentVerificationDTO
from bookstore.application.initiate_payment import InitiatePaymentHandler
from bookstore.application.verify_payment import VerifyPaymentHandler
from bookstore.domain.exceptions import DomainException
from bookstore.infrastructure.bootstrap import (
    book_repository,
    cart_repository,
    gateway_credentials,
    order_repository,
    payment_gateway,
)
from bookstore.infrastructure.cli.common import domain_error, user_option


def _display_result(dto: PaymentVerificationDTO) -> None:
    click.echo(f"Order {dto.order_number}: gateway={dto.gateway_status}")
    click.echo(f"  order status:   {dto.order_status}")
    click.echo(f"  payment status: {dto.payment_status}")
    if not dto.changed:
        click.echo("  (no change)")


@click.command("initiate")
@user_option
@click.option("--id", "order_id", required=True, type=int, help="Order ID to pay.")
def payment_initiate(user_id: str, order_id: int) -> None:
    """Print the signed form fields to post to the gateway."""
    handler = InitiatePaymentHandler(order_repository(), gateway_credentials())

    try:
        form = handler.handle(order_id, user_id)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"POST {form.form_url}")
    for key, value in form.fields.items():
        click.echo(f"  {key}={value}")


@click.command("verify")
@click.option("--data", "payload", required=True, help="Base64 callback payload from the gateway.")
def payment_verify(payload: str) -> None:
    """Verify a gateway callback and settle the order."""
    handler = VerifyPaymentHandler(
        order_repository(),
        cart_repository(),
        book_repository(),
        gateway_credentials(),
    )

    try:
        dto = handler.handle(payload)
    except DomainException as exc:
        raise domain_error(exc)

    _display_result(dto)
    if not dto.verified:
        raise click.ClickException(
            f"[PAYMENT_NOT_COMPLETED] Order is {dto.order_status}, payment is {dto.payment_status}"
        )


@click.command("check")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to reconcile.")
def payment_check(order_id: int) -> None:
    """Ask the gateway for the payment status and reconcile the order."""
    with payment_gateway() as gateway:
        handler = CheckPaymentStatusHandler(
            order_repository(),
            cart_repository(),
            book_repository(),
            gateway,
            gateway_credentials(),
        )
        try:
            dto = handler.handle(order_id)
        except DomainException as exc:
            raise domain_error(exc)

    _display_result(dto)
