from datetime import datetime

from book import Book, BorrowRecord, User


def test_book_to_and_from_dict():
    book = Book.from_dict({"title": "Sapiens", "author": "Yuval Noah Harari", "isbn": 9780099590088, "stock": "4"})
    assert book.isbn == "9780099590088"
    assert book.stock == 4
    assert book.to_dict() == {
        "title": "Sapiens",
        "author": "Yuval Noah Harari",
        "isbn": "9780099590088",
        "stock": 4,
    }


def test_users_do_not_share_borrowed_lists():
    a = User("Daniel", 202)
    b = User("James", 203)
    a.borrowed_books.append(BorrowRecord("1", "Harry Potter", datetime(2026, 1, 15)))
    assert b.borrowed_books == []


def test_user_to_dict_serializes_records():
    due = datetime(2026, 1, 15, 9, 0)
    user = User("Daniel", 202, [BorrowRecord("1", "Harry Potter", due)])
    assert user.to_dict() == {
        "name": "Daniel",
        "id": 202,
        "borrowed_books": [{"isbn": "1", "title": "Harry Potter", "due_date": "2026-01-15T09:00:00"}],
    }

