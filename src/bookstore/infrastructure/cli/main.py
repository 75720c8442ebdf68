import click

from bookstore.infrastructure.cli.book_commands import (
    book_add,
    book_delete,
    book_list,
    book_show,
    book_update,
)
from bookstore.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from bookstore.infrastructure.cli.order_commands import (
    order_by_status,
    order_cancel,
    order_create,
    order_list,
    order_show,
    order_stats,
    order_status,
)
from bookstore.infrastructure.cli.payment_commands import (
    payment_check,
    payment_initiate,
    payment_verify,
)
from bookstore.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """Bookstore catalog, carts, orders and payments."""
    configure_logging()


@cli.group()
def book() -> None:
    """Manage the book catalog."""


@cli.group()
def cart() -> None:
    """Manage a user's cart."""


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def payment() -> None:
    """Gateway payments."""


# Register subcommands
book.add_command(book_add)
book.add_command(book_delete)
book.add_command(book_list)
book.add_command(book_show)
book.add_command(book_update)
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
order.add_command(order_by_status)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_stats)
order.add_command(order_status)
payment.add_command(payment_check)
payment.add_command(payment_initiate)
payment.add_command(payment_verify)
