"""Integration tests for the book catalog use cases."""

import pytest

from bookstore.application.add_book import AddBookHandler
from bookstore.application.delete_book import DeleteBookHandler
from bookstore.application.show_book import ShowBookHandler
from bookstore.application.update_book import UpdateBookHandler
from bookstore.domain.exceptions import BookNotFoundError, ValidationError
from bookstore.domain.model.book import Book
from bookstore.domain.model.value_objects import Money
from tests.fakes import FakeBookRepository


def _setup():
    return FakeBookRepository([
        Book(id="1", title="Muna Madan", author="Devkota", price=Money.of("10.00"), stock=5),
        Book(id="2", title="Seto Bagh", author="Diamond Shumsher", price=Money.of("15.00"), stock=10),
    ])


class TestAddBook:

    def test_ids_follow_the_highest(self):
        repo = _setup()
        book = AddBookHandler(repo).handle(title=" Palpasa Cafe ", author="Narayan Wagle", price="12.50", stock=3)
        assert book.id == "3"
        assert book.title == "Palpasa Cafe"
        assert repo.get_by_id("3").stock == 3

    def test_first_book(self):
        book = AddBookHandler(FakeBookRepository()).handle(title="Karnali Blues", author="Buddhisagar", price="9")
        assert book.id == "1"
        assert book.category == "general"


class TestUpdateBook:

    def test_price_and_stock(self):
        repo = _setup()
        UpdateBookHandler(repo).handle("1", price="11.00", stock=7)
        book = repo.get_by_id("1")
        assert book.price == Money.of("11.00")
        assert book.stock == 7

    def test_nothing_to_update(self):
        with pytest.raises(ValidationError):
            UpdateBookHandler(_setup()).handle("1")

    def test_unknown_book(self):
        with pytest.raises(BookNotFoundError):
            UpdateBookHandler(_setup()).handle("42", stock=1)


class TestShowBook:

    def test_found(self):
        dto = ShowBookHandler(_setup()).handle("2")
        assert dto.title == "Seto Bagh"
        assert dto.stock == 10

    def test_unknown_book(self):
        with pytest.raises(BookNotFoundError, match="'42' not found"):
            ShowBookHandler(_setup()).handle("42")


class TestDeleteBook:

    def test_removes_from_catalog(self):
        repo = _setup()
        removed = DeleteBookHandler(repo).handle("1")

        assert removed.title == "Muna Madan"
        assert repo.get_by_id("1") is None
        assert [b.id for b in repo.list_all()] == ["2"]

    def test_unknown_book(self):
        repo = _setup()
        with pytest.raises(BookNotFoundError):
            DeleteBookHandler(repo).handle("42")
        assert len(repo.list_all()) == 2

    def test_deleted_twice(self):
        repo = _setup()
        DeleteBookHandler(repo).handle("1")
        with pytest.raises(BookNotFoundError):
            DeleteBookHandler(repo).handle("1")
