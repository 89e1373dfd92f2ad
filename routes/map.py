from fastapi import APIRouter, Depends
from db.database import get_db
from config import get_config_value
from utils.awards import count_finished_books, load_child_sessions
from utils.levels import child_level
from utils.reading import distinct_reading_days, minutes_on, reading_streak, total_hours
from utils.records import utc_now
from utils.serializers import child_summary, fetch_child, fetch_family

router = APIRouter()


def _map_entry(conn, child: dict, daily_goal: int) -> dict:
    sessions = load_child_sessions(conn, child["id"])
    today = utc_now().date()
    level = child_level(count_finished_books(conn, child["id"]), child["level_category"])
    return {
        **child_summary(child),
        "rank": level.current.rank,
        "level": level.to_dict(),
        "today_minutes": minutes_on(sessions, today),
        "daily_goal": daily_goal,
        "total_reading_days": distinct_reading_days(sessions),
        "streak": reading_streak(sessions, today),
        "total_hours": total_hours(sessions),
    }


@router.get("/child/{child_id}")
async def child_map(child_id: int, conn = Depends(get_db)):
    """Map position and reading habit counters for a child."""
    child = fetch_child(conn, child_id)
    entry = _map_entry(conn, child, int(get_config_value("reading", "daily_goal_minutes", 15)))
    summary = child_summary(child)
    for key in summary:
        entry.pop(key)
    return {"child": summary, **entry}


@router.get("/family/{family_id}")
async def family_map(family_id: int, conn = Depends(get_db)):
    """Per-child map data plus family totals."""
    family = fetch_family(conn, family_id)
    daily_goal = int(get_config_value("reading", "daily_goal_minutes", 15))
    cursor = conn.cursor()
    cursor.execute(
        "SELECT * FROM children WHERE family_id = ? ORDER BY created_at, id",
        (family_id,),
    )
    children = [_map_entry(conn, dict(row), daily_goal) for row in cursor.fetchall()]
    aggregated = None
    if children:
        aggregated = {
            "rank": int(sum(c["rank"] for c in children) / len(children) + 0.5),
            "today_minutes": sum(c["today_minutes"] for c in children),
            "daily_goal": sum(c["daily_goal"] for c in children),
            "total_reading_days": sum(c["total_reading_days"] for c in children),
            "streak": max(c["streak"] for c in children),
            "total_hours": sum(c["total_hours"] for c in children),
        }
    return {
        "family": {"id": family["id"], "name": family["name"]},
        "children": children,
        "aggregated": aggregated,
    }
