"""CLI commands for the Cart aggregate."""

from __future__ import annotations

import click

from bookstore.application.add_cart_item import AddCartItemHandler
from bookstore.application.clear_cart import ClearCartHandler
from bookstore.application.dto import CartDTO
from bookstore.application.remove_cart_item import RemoveCartItemHandler
from bookstore.application.show_cart import ShowCartHandler
from bookstore.application.update_cart_item import UpdateCartItemHandler
from bookstore.domain.exceptions import DomainException
from bookstore.infrastructure.bootstrap import book_repository, cart_repository
from bookstore.infrastructure.cli.common import domain_error, user_option


def _display_cart(dto: CartDTO) -> None:
    if not dto.items:
        click.echo("Cart is empty.")
        click.echo(f"  {'Cart Total':<27} {dto.total:>20}")
        return

    click.echo(f"  {'Book':<20} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*51}")
    for item in dto.items:
        click.echo(
            f"  {item.title[:20]:<20} {item.quantity:>5} {item.price:>12} {item.line_total:>12}"
        )
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Cart Total':<27} {dto.total:>24}")


@click.command("show")
@user_option
def cart_show(user_id: str) -> None:
    """Show the user's cart."""
    _display_cart(ShowCartHandler(cart_repository()).handle(user_id))


@click.command("add")
@user_option
@click.option("--book", "book_id", required=True, help="Book ID.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Copies to add.")
def cart_add(user_id: str, book_id: str, quantity: int) -> None:
    """Add copies of a book to the cart."""
    handler = AddCartItemHandler(cart_repository(), book_repository())

    try:
        dto = handler.handle(user_id, book_id, quantity)
    except DomainException as exc:
        raise domain_error(exc)

    _display_cart(dto)


@click.command("update")
@user_option
@click.option("--book", "book_id", required=True, help="Book ID.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
@click.option("--refresh-price", is_flag=True, default=False, help="Re-capture the current book price.")
def cart_update(user_id: str, book_id: str, quantity: int, refresh_price: bool) -> None:
    """Set the quantity of a book already in the cart."""
    handler = UpdateCartItemHandler(cart_repository(), book_repository())

    try:
        dto = handler.handle(user_id, book_id, quantity, refresh_price=refresh_price)
    except DomainException as exc:
        raise domain_error(exc)

    _display_cart(dto)


@click.command("remove")
@user_option
@click.option("--book", "book_id", required=True, help="Book ID.")
def cart_remove(user_id: str, book_id: str) -> None:
    """Remove a book from the cart."""
    try:
        dto = RemoveCartItemHandler(cart_repository()).handle(user_id, book_id)
    except DomainException as exc:
        raise domain_error(exc)

    _display_cart(dto)


@click.command("clear")
@user_option
def cart_clear(user_id: str) -> None:
    """Empty the cart."""
    ClearCartHandler(cart_repository()).handle(user_id)
    click.echo("Cart cleared.")
