import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from book import Book, BorrowRecord, User
from config import settings

logger = logging.getLogger(__name__)


class Library:
    """Keeps the book inventory and the borrowing state of registered users.

    Both collections live in memory for the lifetime of the instance. Every
    mutating operation is a coroutine that first awaits a fixed delay (to
    mimic I/O latency), then validates, then mutates. All checks run before
    any state changes, so a rejected call leaves the ledger untouched.
    """

    def __init__(self, delay: Optional[float] = None, clock: Optional[Callable[[], datetime]] = None,
                 loan_days: Optional[int] = None, late_fee_per_day: Optional[float] = None) -> None:
        self.delay = settings.operation_delay if delay is None else delay
        self.clock = clock or datetime.now
        self.loan_days = settings.loan_days if loan_days is None else loan_days
        self.late_fee_per_day = settings.late_fee_per_day if late_fee_per_day is None else late_fee_per_day
        self.currency_symbol = settings.currency_symbol

        self.books: Dict[str, Book] = {}
        self.users: Dict[Any, User] = {}

    # ------------------------- Core operations ------------------------- #
    async def add_book(self, book: Book) -> str:
        """Add a Book, or merge its stock into the existing record with the same ISBN."""
        await self._wait()

        existing = self.books.get(book.isbn)
        if existing is not None:
            # Only stock accumulates; the first record's title/author are kept
            existing.stock += book.stock
            logger.info(f"Stock merged for ISBN {existing.isbn}: +{book.stock} -> {existing.stock}")
            return f"Stock updated for {existing.title}"

        self.books[book.isbn] = book
        logger.info(f"Book added: isbn={book.isbn}, stock={book.stock}")
        return f"Book added: {book.title}"

    async def register_user(self, user: User) -> str:
        await self._wait()

        if user.id in self.users:
            logger.warning(f"Rejected duplicate registration for user ID {user.id}")
            raise DuplicateUserError(user.id)

        self.users[user.id] = user
        logger.info(f"User registered: id={user.id}")
        return f"User registered: {user.name}"

    async def borrow_book(self, user_id: Any, isbn: Any) -> str:
        """Check out one copy of a title. The loan is due ``loan_days`` from now."""
        await self._wait()
        isbn = str(isbn)

        user = self._require_user(user_id)
        book = self._require_book(isbn)
        if book.stock <= 0:
            logger.warning(f"Borrow rejected, no stock left for ISBN {isbn}")
            raise BookUnavailableError(isbn)

        book.stock -= 1
        due = self.clock() + timedelta(days=self.loan_days)
        # A user may hold several copies of the same ISBN at once
        user.borrowed_books.append(BorrowRecord(isbn=isbn, title=book.title, due_date=due))

        logger.info(f"User {user_id} borrowed ISBN {isbn}, due {due.isoformat()}")
        return f"Checkout successful. Due: {self.format_due_date(due)}"

    async def return_book(self, user_id: Any, isbn: Any) -> str:
        """Return a borrowed title and report any late fee owed."""
        await self._wait()
        isbn = str(isbn)

        user = self._require_user(user_id)
        book = self._require_book(isbn)
        record = next((r for r in user.borrowed_books if r.isbn == isbn), None)
        if record is None:
            logger.warning(f"Return rejected, user {user_id} does not hold ISBN {isbn}")
            raise NotBorrowedError(user_id, isbn)

        book.stock += 1
        # Every record for this ISBN is cleared, even if the user held more than one copy
        user.borrowed_books = [r for r in user.borrowed_books if r.isbn != isbn]

        returned_at = self.clock()
        logger.info(f"User {user_id} returned ISBN {isbn}")
        if returned_at > record.due_date:
            fee = self.calculate_late_fee(record.due_date, returned_at)
            logger.info(f"Late fee for user {user_id} on ISBN {isbn}: {fee:.2f}")
            return f"Return successful. Late fee: {self.currency_symbol}{fee:.2f}"

        return "Return successful"

    # ------------------------- Queries ------------------------- #
    def find_book(self, isbn: Any) -> Optional[Book]:
        return self.books.get(str(isbn))

    def find_user(self, user_id: Any) -> Optional[User]:
        return self.users.get(user_id)

    def list_books(self) -> List[Book]:
        return list(self.books.values())

    def list_users(self) -> List[User]:
        return list(self.users.values())

    def get_statistics(self) -> Dict[str, Any]:
        """Summarize inventory and circulation."""
        return {
            "total_titles": len(self.books),
            "total_stock": sum(b.stock for b in self.books.values()),
            "registered_users": len(self.users),
            "active_loans": sum(len(u.borrowed_books) for u in self.users.values()),
        }

    def calculate_late_fee(self, due_date: datetime, returned_at: datetime) -> float:
        """Fee for whole days elapsed past ``due_date``; zero unless strictly late."""
        if returned_at <= due_date:
            return 0.0
        days_late = (returned_at - due_date) // timedelta(days=1)
        return days_late * self.late_fee_per_day

    # ------------------------- Helpers ------------------------- #
    @staticmethod
    def format_due_date(due: datetime) -> str:
        """Human readable date, e.g. 'Mon Nov 02 2026'."""
        return due.strftime("%a %b %d %Y")

    async def _wait(self) -> None:
        await asyncio.sleep(self.delay)

    def _require_user(self, user_id: Any) -> User:
        user = self.users.get(user_id)
        if user is None:
            logger.warning(f"Unknown user ID {user_id}")
            raise UserNotFoundError(user_id)
        return user

    def _require_book(self, isbn: str) -> Book:
        book = self.books.get(isbn)
        if book is None:
            logger.warning(f"Unknown ISBN {isbn}")
            raise BookNotFoundError(isbn)
        return book


class LibraryError(Exception):
    """Base class for rejected ledger operations."""


class DuplicateUserError(LibraryError, ValueError):
    def __init__(self, user_id: Any) -> None:
        self.user_id = user_id
        super().__init__(f"User ID: {user_id} already exists")


class UserNotFoundError(LibraryError, LookupError):
    def __init__(self, user_id: Any) -> None:
        self.user_id = user_id
        super().__init__(f"User with ID: {user_id} doesn't exist")


class BookNotFoundError(LibraryError, LookupError):
    def __init__(self, isbn: str) -> None:
        self.isbn = isbn
        super().__init__(f"Book with ISBN: {isbn} doesn't exist")


class BookUnavailableError(LibraryError):
    def __init__(self, isbn: str) -> None:
        self.isbn = isbn
        super().__init__("Book is currently unavailable")


class NotBorrowedError(LibraryError):
    def __init__(self, user_id: Any, isbn: str) -> None:
        self.user_id = user_id
        self.isbn = isbn
        super().__init__(f"User with ID: {user_id} doesn't have this book")
