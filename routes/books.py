from fastapi import APIRouter, Depends, HTTPException, Query, status
from db.database import get_db
from models.book import BookCreate, BookStatus, BookUpdate
from utils.awards import check_and_award
from utils.records import utc_now
from utils.serializers import book_to_dict, fetch_book, fetch_child
from typing import Optional
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

BOOK_FIELDS = (
    "title",
    "author",
    "isbn",
    "genre",
    "total_pages",
    "status",
    "current_page",
    "start_date",
    "finish_date",
    "rating",
    "notes",
    "favorite_character",
    "recommended",
)

# Columns that cannot be cleared with an explicit null.
NOT_NULL_FIELDS = {"title", "author", "genre", "status", "recommended"}


def _column_value(field: str, value):
    if value is None:
        return None
    if field in ("start_date", "finish_date"):
        return value.isoformat()
    if field == "recommended":
        return int(value)
    if hasattr(value, "value"):
        return value.value
    return value


@router.get("/child/{child_id}")
async def list_books(
    child_id: int,
    book_status: Optional[BookStatus] = Query(default=None, alias="status"),
    conn = Depends(get_db),
):
    """Books for a child, most recently touched first."""
    fetch_child(conn, child_id)
    cursor = conn.cursor()
    if book_status is None:
        cursor.execute(
            "SELECT * FROM books WHERE child_id = ? ORDER BY updated_at DESC, id DESC",
            (child_id,),
        )
    else:
        cursor.execute(
            "SELECT * FROM books WHERE child_id = ? AND status = ? ORDER BY updated_at DESC, id DESC",
            (child_id, book_status.value),
        )
    return [book_to_dict(row) for row in cursor.fetchall()]


@router.get("/{book_id}")
async def get_book(book_id: int, conn = Depends(get_db)):
    return fetch_book(conn, book_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(payload: BookCreate, conn = Depends(get_db)):
    """Add a book; finishing it triggers an achievement check."""
    fetch_child(conn, payload.child_id)
    values = {field: _column_value(field, getattr(payload, field)) for field in BOOK_FIELDS}
    values["author"] = values["author"] or "Desconhecido"
    if values["status"] == BookStatus.FINISHED.value and not values["finish_date"]:
        values["finish_date"] = utc_now().isoformat()
    columns = ", ".join(("child_id",) + BOOK_FIELDS)
    placeholders = ", ".join("?" for _ in range(len(BOOK_FIELDS) + 1))
    cursor = conn.cursor()
    cursor.execute(
        f"INSERT INTO books ({columns}) VALUES ({placeholders})",
        [payload.child_id] + [values[field] for field in BOOK_FIELDS],
    )
    book_id = cursor.lastrowid
    conn.commit()

    new_achievements = []
    if values["status"] == BookStatus.FINISHED.value:
        new_achievements = check_and_award(conn, payload.child_id)
    return {
        "book": fetch_book(conn, book_id),
        "new_achievements": [achievement.to_dict() for achievement in new_achievements],
    }


@router.put("/{book_id}")
async def update_book(book_id: int, payload: BookUpdate, conn = Depends(get_db)):
    """Update a book. Status changes are not policed; the caller owns corrections."""
    book = fetch_book(conn, book_id)
    changes = payload.model_dump(exclude_unset=True)
    for field in NOT_NULL_FIELDS:
        if field in changes and changes[field] is None:
            changes.pop(field)
    values = {field: _column_value(field, changes[field]) for field in BOOK_FIELDS if field in changes}
    becomes_finished = values.get("status", book["status"]) == BookStatus.FINISHED.value
    if becomes_finished and not values.get("finish_date", book["finish_date"]):
        values["finish_date"] = utc_now().isoformat()
    if values:
        assignments = ", ".join(f"{field} = ?" for field in values)
        conn.execute(
            f"UPDATE books SET {assignments}, updated_at = datetime('now') WHERE id = ?",
            list(values.values()) + [book_id],
        )
        conn.commit()
    if book["status"] != values.get("status", book["status"]):
        logger.info("Book %s moved from %s to %s", book_id, book["status"], values["status"])

    new_achievements = []
    if becomes_finished:
        new_achievements = check_and_award(conn, book["child_id"])
    return {
        "book": fetch_book(conn, book_id),
        "new_achievements": [achievement.to_dict() for achievement in new_achievements],
    }


@router.delete("/{book_id}")
async def delete_book(book_id: int, conn = Depends(get_db)):
    cursor = conn.cursor()
    cursor.execute("DELETE FROM books WHERE id = ?", (book_id,))
    if cursor.rowcount == 0:
        raise HTTPException(status_code=404, detail="Book not found")
    conn.commit()
    return {"success": True}
