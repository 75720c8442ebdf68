"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from bookstore.application.cancel_order import CancelOrderHandler
from bookstore.application.create_order import CreateOrderHandler
from bookstore.application.dto import OrderDTO
from bookstore.application.list_orders import ListOrdersHandler
from bookstore.application.list_orders_by_status import ListOrdersByStatusHandler
from bookstore.application.order_stats import UserOrderStatsHandler
from bookstore.application.show_order import ShowOrderHandler
from bookstore.application.update_order_status import UpdateOrderStatusHandler
from bookstore.domain.exceptions import DomainException
from bookstore.domain.model.order import OrderStatus, PaymentMethod
from bookstore.domain.model.value_objects import ShippingAddress
from bookstore.infrastructure.bootstrap import (
    book_repository,
    cart_repository,
    cost_policy,
    order_repository,
)
from bookstore.infrastructure.cli.common import domain_error, user_option


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id} {dto.order_number}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Payment method: {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.cancelled_at:
        click.echo(f"Cancelled: {dto.cancelled_at}")
    if dto.delivered_at:
        click.echo(f"Delivered: {dto.delivered_at}")
    if dto.notes:
        click.echo(f"Notes: {dto.notes}")
    click.echo()

    click.echo(f"  {'Book':<20} {'Qty':>5} {'Price':>12} {'Subtotal':>12}")
    click.echo(f"  {'-'*51}")
    for item in dto.items:
        click.echo(
            f"  {item.title[:20]:<20} {item.quantity:>5} {item.unit_price:>12} {item.subtotal:>12}"
        )
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>24}")
    click.echo(f"  {'Tax':<27} {dto.tax:>24}")
    click.echo(f"  {'Shipping':<27} {dto.shipping_cost:>24}")
    click.echo(f"  {'Order Total':<27} {dto.total:>24}")


@click.command("create")
@user_option
@click.option(
    "--payment-method",
    required=True,
    type=click.Choice([m.value for m in PaymentMethod]),
    help="How the order is paid.",
)
@click.option("--full-name", required=True)
@click.option("--phone", required=True)
@click.option("--address", required=True)
@click.option("--city", required=True)
@click.option("--state", required=True)
@click.option("--zip", "zip_code", required=True)
@click.option("--country", default="USA", show_default=True)
@click.option("--notes", default=None, help="Delivery notes (max 500 characters).")
def order_create(
    user_id: str,
    payment_method: str,
    full_name: str,
    phone: str,
    address: str,
    city: str,
    state: str,
    zip_code: str,
    country: str,
    notes: str | None,
) -> None:
    """Place an order for everything in the cart."""
    handler = CreateOrderHandler(
        order_repo=order_repository(),
        cart_repo=cart_repository(),
        book_repo=book_repository(),
        cost_policy=cost_policy(),
    )

    try:
        shipping = ShippingAddress(
            full_name=full_name,
            phone_number=phone,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            country=country,
        )
        dto = handler.handle(user_id, shipping, payment_method, notes=notes)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo("Order created successfully.")
    _display_order(dto)


@click.command("list")
@user_option
@click.option(
    "--status",
    default=None,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Only orders in this status.",
)
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
def order_list(user_id: str, status: str | None, page: int, limit: int) -> None:
    """List the user's orders, newest first."""
    try:
        result = ListOrdersHandler(order_repository()).handle(user_id, status, page, limit)
    except DomainException as exc:
        raise domain_error(exc)

    if not result.orders:
        click.echo("No orders found.")
    for dto in result.orders:
        click.echo(
            f"#{dto.id:<5} {dto.order_number:<22} {dto.status:<11} {dto.payment_status:<10} {dto.total:>14}"
        )
    p = result.pagination
    click.echo(f"Page {p.current_page} of {p.total_pages} ({p.total_items} orders)")


@click.command("show")
@user_option
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(user_id: str, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id, user_id)
    except DomainException as exc:
        raise domain_error(exc)

    _display_order(dto)
    if dto.can_be_refunded:
        click.echo("This order is eligible for a refund.")


@click.command("cancel")
@user_option
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
def order_cancel(user_id: str, order_id: int) -> None:
    """Cancel an order (returns its books to stock)."""
    handler = CancelOrderHandler(
        order_repo=order_repository(),
        book_repo=book_repository(),
    )

    try:
        dto = handler.handle(order_id, user_id)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Order #{dto.id} cancelled.")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--status", "new_status", required=True, help="New order status.")
def order_status(order_id: int, new_status: str) -> None:
    """Move an order to a new status (admin)."""
    try:
        dto = UpdateOrderStatusHandler(order_repository()).handle(order_id, new_status)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("stats")
@user_option
def order_stats(user_id: str) -> None:
    """Show order statistics for the user."""
    stats = UserOrderStatsHandler(order_repository()).handle(user_id)
    click.echo(f"Total orders:        {stats.total_orders}")
    click.echo(f"Total spent:         {stats.total_spent}")
    click.echo(f"Average order value: {stats.average_order_value}")


@click.command("by-status")
@click.option(
    "--status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Order status to list.",
)
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
def order_by_status(status: str, page: int, limit: int) -> None:
    """List every user's orders in one status, newest first (admin)."""
    try:
        result = ListOrdersByStatusHandler(order_repository()).handle(status, page, limit)
    except DomainException as exc:
        raise domain_error(exc)

    if not result.orders:
        click.echo("No orders found.")
    for dto in result.orders:
        click.echo(
            f"#{dto.id:<5} {dto.order_number:<22} {dto.user_id:<12} {dto.payment_status:<10} {dto.total:>14}"
        )
    p = result.pagination
    click.echo(f"Page {p.current_page} of {p.total_pages} ({p.total_items} orders)")
