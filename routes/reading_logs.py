from fastapi import APIRouter, Depends, HTTPException, status
from db.database import get_db
from models.reading_session import ReadingSessionCreate
from utils.awards import check_and_award
from utils.records import utc_now
from utils.serializers import fetch_child

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def log_reading(payload: ReadingSessionCreate, conn = Depends(get_db)):
    """Record a reading session, advance the book's current page, re-check achievements."""
    fetch_child(conn, payload.child_id)
    cursor = conn.cursor()
    if payload.book_id is not None:
        cursor.execute(
            "SELECT id, current_page, total_pages FROM books WHERE id = ? AND child_id = ?",
            (payload.book_id, payload.child_id),
        )
        book = cursor.fetchone()
        if not book:
            raise HTTPException(status_code=404, detail="Book not found")
        if payload.pages:
            current_page = (book["current_page"] or 0) + payload.pages
            if book["total_pages"]:
                current_page = min(current_page, book["total_pages"])
            cursor.execute(
                """
                UPDATE books
                SET current_page = ?,
                    status = CASE WHEN status = 'to-read' THEN 'reading' ELSE status END,
                    updated_at = datetime('now')
                WHERE id = ?
                """,
                (current_page, payload.book_id),
            )
    session_date = payload.date or utc_now()
    cursor.execute(
        """
        INSERT INTO reading_sessions (child_id, book_id, minutes, pages, mood, date)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            payload.child_id,
            payload.book_id,
            payload.minutes,
            payload.pages or 0,
            payload.mood,
            session_date.isoformat(),
        ),
    )
    session_id = cursor.lastrowid
    conn.commit()
    new_achievements = check_and_award(conn, payload.child_id)
    cursor.execute("SELECT * FROM reading_sessions WHERE id = ?", (session_id,))
    return {
        "session": dict(cursor.fetchone()),
        "new_achievements": [achievement.to_dict() for achievement in new_achievements],
    }


@router.get("/child/{child_id}")
async def list_reading_sessions(child_id: int, conn = Depends(get_db)):
    fetch_child(conn, child_id)
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT rs.*, b.title AS book_title
        FROM reading_sessions rs
        LEFT JOIN books b ON b.id = rs.book_id
        WHERE rs.child_id = ?
        ORDER BY rs.date DESC, rs.id DESC
        """,
        (child_id,),
    )
    return [dict(row) for row in cursor.fetchall()]
