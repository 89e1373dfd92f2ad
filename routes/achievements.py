from fastapi import APIRouter, Depends
from db.database import get_db
from utils.awards import check_and_award, load_catalog
from utils.serializers import fetch_child

router = APIRouter()

CATEGORY_ORDER = ("READING", "GENRE", "STREAK", "SPECIAL")


@router.get("")
async def list_achievements(conn = Depends(get_db)):
    """Full catalog, grouped by category then code."""
    catalog = load_catalog(conn)
    catalog.sort(
        key=lambda a: (CATEGORY_ORDER.index(a.category) if a.category in CATEGORY_ORDER else len(CATEGORY_ORDER), a.code)
    )
    return [achievement.to_dict() for achievement in catalog]


@router.get("/child/{child_id}")
async def child_achievements(child_id: int, conn = Depends(get_db)):
    """Catalog annotated with what this child has earned."""
    fetch_child(conn, child_id)
    cursor = conn.cursor()
    cursor.execute(
        "SELECT achievement_id, earned_at FROM child_achievements WHERE child_id = ?",
        (child_id,),
    )
    earned_at = {row["achievement_id"]: row["earned_at"] for row in cursor.fetchall()}
    catalog = sorted(load_catalog(conn), key=lambda a: a.code)
    achievements = []
    for achievement in catalog:
        entry = achievement.to_dict()
        entry["earned"] = achievement.id in earned_at
        entry["earned_at"] = earned_at.get(achievement.id)
        achievements.append(entry)
    return {
        "achievements": achievements,
        "total_earned": len(earned_at),
        "total_available": len(catalog),
    }


@router.post("/check/{child_id}")
async def check_achievements(child_id: int, conn = Depends(get_db)):
    fetch_child(conn, child_id)
    new_achievements = check_and_award(conn, child_id)
    return {
        "new_achievements": [achievement.to_dict() for achievement in new_achievements],
        "count": len(new_achievements),
    }
