"""CLI commands for the Book catalog."""

from __future__ import annotations

import click

from bookstore.application.add_book import AddBookHandler
from bookstore.application.delete_book import DeleteBookHandler
from bookstore.application.dto import book_to_dto
from bookstore.application.show_book import ShowBookHandler
from bookstore.application.update_book import UpdateBookHandler
from bookstore.domain.exceptions import DomainException
from bookstore.infrastructure.bootstrap import book_repository
from bookstore.infrastructure.cli.common import domain_error


@click.command("add")
@click.option("--title", required=True, help="Book title.")
@click.option("--author", required=True, help="Author name.")
@click.option("--price", required=True, help="Price (e.g. 450.00).")
@click.option("--stock", default=0, show_default=True, type=int, help="Copies on the shelf.")
@click.option("--category", default="general", show_default=True, help="Catalog category.")
def book_add(title: str, author: str, price: str, stock: int, category: str) -> None:
    """Add a new book to the catalog."""
    handler = AddBookHandler(book_repo=book_repository())

    try:
        book = handler.handle(title=title, author=author, price=price, stock=stock, category=category)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Book #{book.id} '{book.title}' added at {book.price} ({book.stock} in stock)")


@click.command("list")
def book_list() -> None:
    """List all books in the catalog."""
    books = [book_to_dto(b) for b in book_repository().list_all()]

    if not books:
        click.echo("No books found.")
        return

    click.echo(f"{'ID':<6} {'Title':<30} {'Author':<20} {'Price':>12} {'Stock':>6}")
    click.echo("-" * 78)
    for b in books:
        click.echo(f"{b.id:<6} {b.title[:30]:<30} {b.author[:20]:<20} {b.price:>12} {b.stock:>6}")


@click.command("update")
@click.option("--id", "book_id", required=True, help="Book ID.")
@click.option("--price", default=None, help="New price.")
@click.option("--stock", default=None, type=int, help="New stock level.")
def book_update(book_id: str, price: str | None, stock: int | None) -> None:
    """Update a book's price and/or stock level."""
    handler = UpdateBookHandler(book_repo=book_repository())

    try:
        book = handler.handle(book_id=book_id, price=price, stock=stock)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Book #{book.id} updated: {book.price}, {book.stock} in stock")


@click.command("show")
@click.option("--id", "book_id", required=True, help="Book ID.")
def book_show(book_id: str) -> None:
    """Show one book."""
    try:
        dto = ShowBookHandler(book_repository()).handle(book_id)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Book #{dto.id}: {dto.title} by {dto.author}")
    click.echo(f"Category: {dto.category}")
    click.echo(f"Price:    {dto.price}")
    click.echo(f"Stock:    {dto.stock}")


@click.command("delete")
@click.option("--id", "book_id", required=True, help="Book ID.")
def book_delete(book_id: str) -> None:
    """Remove a book from the catalog."""
    try:
        book = DeleteBookHandler(book_repository()).handle(book_id)
    except DomainException as exc:
        raise domain_error(exc)

    click.echo(f"Book #{book.id} '{book.title}' deleted")
