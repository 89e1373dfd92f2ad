from fastapi import APIRouter, Depends, HTTPException, status
from db.database import get_db
from models.family import FamilyCreate, FamilyUpdate
from utils.serializers import book_to_dict, family_settings_to_dict, fetch_family
import logging
import sqlite3

router = APIRouter()
logger = logging.getLogger(__name__)


def _family_payload(conn, family_id: int, include_books: bool = False) -> dict:
    family = fetch_family(conn, family_id)
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM family_settings WHERE family_id = ?", (family_id,))
    family["settings"] = family_settings_to_dict(cursor.fetchone())
    cursor.execute(
        """
        SELECT c.*, COUNT(b.id) AS book_count
        FROM children c
        LEFT JOIN books b ON b.child_id = c.id
        WHERE c.family_id = ?
        GROUP BY c.id
        ORDER BY c.created_at, c.id
        """,
        (family_id,),
    )
    children = [dict(row) for row in cursor.fetchall()]
    if include_books:
        for child in children:
            cursor.execute(
                "SELECT * FROM books WHERE child_id = ? ORDER BY updated_at DESC, id DESC",
                (child["id"],),
            )
            child["books"] = [book_to_dict(row) for row in cursor.fetchall()]
            cursor.execute(
                """
                SELECT a.id, a.code, a.name, a.description, a.icon, a.category, ca.earned_at
                FROM child_achievements ca
                JOIN achievements a ON a.id = ca.achievement_id
                WHERE ca.child_id = ?
                ORDER BY ca.earned_at, ca.id
                """,
                (child["id"],),
            )
            child["achievements"] = [dict(row) for row in cursor.fetchall()]
    family["children"] = children
    return family


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_family(payload: FamilyCreate, conn = Depends(get_db)):
    """Create a family with default settings."""
    cursor = conn.cursor()
    try:
        cursor.execute(
            "INSERT INTO families (name, email) VALUES (?, ?)",
            (payload.name.strip(), payload.email),
        )
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=409, detail="Email already registered")
    family_id = cursor.lastrowid
    cursor.execute("INSERT INTO family_settings (family_id) VALUES (?)", (family_id,))
    conn.commit()
    logger.info("Created family %s", family_id)
    return _family_payload(conn, family_id)


@router.get("/{family_id}")
async def get_family(family_id: int, conn = Depends(get_db)):
    return _family_payload(conn, family_id)


@router.get("/{family_id}/full")
async def get_family_full(family_id: int, conn = Depends(get_db)):
    """Family with every child's books and earned achievements."""
    return _family_payload(conn, family_id, include_books=True)


@router.put("/{family_id}")
async def update_family(family_id: int, payload: FamilyUpdate, conn = Depends(get_db)):
    fetch_family(conn, family_id)
    if payload.name is not None:
        conn.execute(
            "UPDATE families SET name = ?, updated_at = datetime('now') WHERE id = ?",
            (payload.name.strip(), family_id),
        )
        conn.commit()
    return _family_payload(conn, family_id)


@router.delete("/{family_id}")
async def delete_family(family_id: int, conn = Depends(get_db)):
    cursor = conn.cursor()
    cursor.execute("DELETE FROM families WHERE id = ?", (family_id,))
    if cursor.rowcount == 0:
        raise HTTPException(status_code=404, detail="Family not found")
    conn.commit()
    logger.info("Deleted family %s", family_id)
    return {"success": True}
