from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional


class Book:
    """Represents a single title in the library inventory."""

    def __init__(self, title: str, author: str, isbn: Any, stock: int = 0) -> None:
        self.title = title
        self.author = author
        # isbn is always kept in string form; it is the inventory key
        self.isbn = str(isbn)
        self.stock = stock

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ISBN: {self.isbn})"

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "stock": self.stock,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            title=data["title"],
            author=data["author"],
            isbn=data["isbn"],
            stock=int(data.get("stock", 0)),
        )


class BorrowRecord:
    """One outstanding loan of a title, held in the borrowing user's list."""

    def __init__(self, isbn: str, title: str, due_date: datetime) -> None:
        self.isbn = isbn
        self.title = title
        self.due_date = due_date

    def to_dict(self) -> dict:
        return {
            "isbn": self.isbn,
            "title": self.title,
            "due_date": self.due_date.isoformat(),
        }


class User:
    """A registered borrower. The id is stored exactly as given."""

    def __init__(self, name: str, id: Any, borrowed_books: Optional[List[BorrowRecord]] = None) -> None:
        self.name = name
        self.id = id
        self.borrowed_books: List[BorrowRecord] = borrowed_books if borrowed_books is not None else []

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} (ID: {self.id})"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "id": self.id,
            "borrowed_books": [record.to_dict() for record in self.borrowed_books],
        }
