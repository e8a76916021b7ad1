import asyncio
import csv
import logging
import os
import re
from datetime import timedelta
from typing import Any, List, Optional

import typer

from book import Book, User
from config import settings
from library import Library, LibraryError
from utils.ui_helpers import (
    set_output_mode,
    print_message,
    print_error,
    print_section,
    print_inventory,
    print_stats_result,
)

app = typer.Typer(help=f"{settings.app_name} CLI")

OPERATION_ARITY = {"book": 4, "user": 2, "borrow": 2, "return": 2}


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (output mode, logging)."""
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    if output:
        set_output_mode(output)


# ------------------------- Demo driver ------------------------- #
async def run_demo(library: Library, late_days: int = 0) -> bool:
    """Walk the ledger through a fixed scenario. Stops at the first rejected operation.

    Returns True when every step succeeded.
    """
    book1 = Book("Harry Potter", "Harry", "1", 10)
    book2 = Book("48 Laws of Power", "Robert Greene", "2", 50)
    book3 = Book("Harry Potter Vol 2", "Harry", "1", 5)  # same ISBN as book1

    user1 = User("Daniel", 202)
    user2 = User("James", 203)

    try:
        print_message(await library.add_book(book1))
        print_message(await library.add_book(book2))
        print_message(await library.add_book(book3))

        print_message(await library.register_user(user1))
        print_message(await library.register_user(user2))

        print_section("Borrow Test")
        print_message(await library.borrow_book(user1.id, book1.isbn))

        print_section("Return Test")
        print_message(await library.return_book(user1.id, book1.isbn))

        print_section("Late Fee Test")
        print_message(await library.borrow_book(user1.id, book2.isbn))
        if late_days > 0:
            start = library.clock()
            overdue_at = start + timedelta(days=library.loan_days + late_days)
            library.clock = lambda: overdue_at
        print_message(await library.return_book(user1.id, book2.isbn))
    except LibraryError as e:
        print_error(str(e))
        return False
    return True


@app.command("demo")
def cli_demo(
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds of simulated latency per operation"),
    late_days: int = typer.Option(0, "--late-days", min=0, help="Return the second loan this many days past due"),
):
    """Run the sample circulation scenario and show the resulting inventory."""
    library = Library(delay=delay)
    asyncio.run(run_demo(library, late_days=late_days))

    print_section("Inventory")
    print_inventory(library.list_books())
    print_stats_result(library.get_statistics())


# ------------------------- Operation scripts ------------------------- #
def parse_user_id(raw: str) -> Any:
    """Numeric ids become ints; anything else stays a string."""
    raw = raw.strip()
    return int(raw) if re.fullmatch(r"-?[0-9]+", raw) else raw


def parse_operations(lines: List[str]) -> List[tuple]:
    """Turn script lines into (line_no, op, args) tuples.

    Raises ValueError on an unknown operation or a wrong number of fields.
    """
    operations = []
    for line_no, row in enumerate(csv.reader(lines), 1):
        if not row or not row[0].strip() or row[0].strip().startswith("#"):
            continue
        op = row[0].strip().lower()
        args = [field.strip() for field in row[1:]]
        if op not in OPERATION_ARITY:
            raise ValueError(f"Line {line_no}: unknown operation '{op}'")
        if len(args) != OPERATION_ARITY[op]:
            raise ValueError(f"Line {line_no}: '{op}' expects {OPERATION_ARITY[op]} fields, got {len(args)}")
        if op == "book" and not re.fullmatch(r"[0-9]+", args[3]):
            raise ValueError(f"Line {line_no}: stock must be a non-negative integer, got '{args[3]}'")
        operations.append((line_no, op, args))
    return operations


async def apply_operation(library: Library, op: str, args: List[str]) -> str:
    if op == "book":
        title, author, isbn, stock = args
        return await library.add_book(Book.from_dict({"title": title, "author": author, "isbn": isbn, "stock": stock}))
    if op == "user":
        name, user_id = args
        return await library.register_user(User(name, parse_user_id(user_id)))
    if op == "borrow":
        return await library.borrow_book(parse_user_id(args[0]), args[1])
    return await library.return_book(parse_user_id(args[0]), args[1])


async def run_script(library: Library, operations: List[tuple]) -> bool:
    for line_no, op, args in operations:
        try:
            print_message(await apply_operation(library, op, args))
        except LibraryError as e:
            print_error(f"Line {line_no}: {e}")
            return False
    return True


@app.command("run")
def cli_run(
    file_path: str,
    delay: Optional[float] = typer.Option(None, "--delay", help="Seconds of simulated latency per operation"),
):
    """Execute an operation script (book/user/borrow/return lines) against a fresh ledger."""
    if not os.path.exists(file_path):
        print(f"File not found: {file_path}")
        raise typer.Exit(code=1)

    with open(file_path, "r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    try:
        operations = parse_operations(lines)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    library = Library(delay=delay)
    ok = asyncio.run(run_script(library, operations))

    print_section("Inventory")
    print_inventory(library.list_books())
    print_stats_result(library.get_statistics())
    if not ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
