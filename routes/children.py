from fastapi import APIRouter, Depends, HTTPException, status
from db.database import get_db
from models.child import ChildCreate, ChildUpdate
from config import get_config_value
from utils.awards import count_finished_books
from utils.levels import child_level
from utils.serializers import book_to_dict, fetch_child, fetch_family

router = APIRouter()

UPDATABLE_FIELDS = ("name", "avatar", "birth_year", "level_category")


def _child_payload(conn, child_id: int) -> dict:
    child = fetch_child(conn, child_id)
    cursor = conn.cursor()
    cursor.execute(
        "SELECT * FROM books WHERE child_id = ? ORDER BY COALESCE(finish_date, created_at) DESC, id DESC",
        (child_id,),
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
        (child_id,),
    )
    child["achievements"] = [dict(row) for row in cursor.fetchall()]
    child["book_count"] = len(child["books"])
    child["level"] = child_level(count_finished_books(conn, child_id), child["level_category"]).to_dict()
    return child


@router.get("/family/{family_id}")
async def list_children(family_id: int, conn = Depends(get_db)):
    """Children of a family, oldest registration first."""
    fetch_family(conn, family_id)
    cursor = conn.cursor()
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
    return [dict(row) for row in cursor.fetchall()]


@router.get("/{child_id}")
async def get_child(child_id: int, conn = Depends(get_db)):
    return _child_payload(conn, child_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_child(payload: ChildCreate, conn = Depends(get_db)):
    fetch_family(conn, payload.family_id)
    category = payload.level_category.value if payload.level_category else get_config_value(
        "reading", "default_level_category", "EXPLORERS"
    )
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT INTO children (family_id, name, avatar, birth_year, level_category)
        VALUES (?, ?, ?, ?, ?)
        """,
        (payload.family_id, payload.name.strip(), payload.avatar, payload.birth_year, category),
    )
    child_id = cursor.lastrowid
    conn.commit()
    return _child_payload(conn, child_id)


@router.put("/{child_id}")
async def update_child(child_id: int, payload: ChildUpdate, conn = Depends(get_db)):
    fetch_child(conn, child_id)
    changes = payload.model_dump(exclude_unset=True, mode="json")
    for required in ("name", "avatar", "level_category"):
        if changes.get(required) is None:
            changes.pop(required, None)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
    fields = [field for field in UPDATABLE_FIELDS if field in changes]
    if fields:
        assignments = ", ".join(f"{field} = ?" for field in fields)
        conn.execute(
            f"UPDATE children SET {assignments}, updated_at = datetime('now') WHERE id = ?",
            [changes[field] for field in fields] + [child_id],
        )
        conn.commit()
    return _child_payload(conn, child_id)


@router.delete("/{child_id}")
async def delete_child(child_id: int, conn = Depends(get_db)):
    cursor = conn.cursor()
    cursor.execute("DELETE FROM children WHERE id = ?", (child_id,))
    if cursor.rowcount == 0:
        raise HTTPException(status_code=404, detail="Child not found")
    conn.commit()
    return {"success": True}
