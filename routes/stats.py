from collections import Counter
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from db.database import get_db
from utils.awards import load_child_books
from utils.genres import aggregate, favorite_genre
from utils.levels import child_level
from utils.reading import (
    LEADERBOARD_PERIODS,
    average_rating,
    count_finished_in_month,
    count_finished_in_year,
    leaderboard_cutoff,
    monthly_finished_counts,
)
from utils.records import parse_moment, utc_now
from utils.serializers import child_summary, fetch_child, fetch_family

router = APIRouter()


def _finished_count(books) -> int:
    return sum(1 for book in books if book.finished)


def _family_children(conn, family_id: int) -> list:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT * FROM children WHERE family_id = ? ORDER BY created_at, id",
        (family_id,),
    )
    return [dict(row) for row in cursor.fetchall()]


def _achievement_count(conn, child_id: int) -> int:
    cursor = conn.cursor()
    cursor.execute("SELECT COUNT(*) FROM child_achievements WHERE child_id = ?", (child_id,))
    return int(cursor.fetchone()[0] or 0)


@router.get("/child/{child_id}")
async def child_stats(child_id: int, conn = Depends(get_db)):
    """Level, book totals, genre discovery and recent achievements for a child."""
    child = fetch_child(conn, child_id)
    books = load_child_books(conn, child_id)
    now = utc_now()
    genre_stats = [entry.to_dict() for entry in aggregate(books)]

    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT a.id, a.code, a.name, a.description, a.icon, a.category, ca.earned_at
        FROM child_achievements ca
        JOIN achievements a ON a.id = ca.achievement_id
        WHERE ca.child_id = ?
        ORDER BY ca.earned_at DESC, ca.id DESC
        """,
        (child_id,),
    )
    earned = [dict(row) for row in cursor.fetchall()]
    cursor.execute("SELECT COUNT(*) FROM achievements")
    total_achievements = cursor.fetchone()[0]

    return {
        "child": child_summary(child),
        "level": child_level(_finished_count(books), child["level_category"]).to_dict(),
        "books": {
            "total": len(books),
            "finished": _finished_count(books),
            "this_month": count_finished_in_month(books, now),
            "this_year": count_finished_in_year(books, now),
            "average_rating": average_rating(books),
        },
        "genres": {
            "stats": genre_stats,
            "discovered": sum(1 for entry in genre_stats if entry["discovered"]),
            "total": len(genre_stats),
            "favorite": favorite_genre(books),
        },
        "achievements": {
            "earned": len(earned),
            "total": total_achievements,
            "recent": earned[:3],
        },
    }


@router.get("/family/{family_id}")
async def family_stats(family_id: int, conn = Depends(get_db)):
    family = fetch_family(conn, family_id)
    children = _family_children(conn, family_id)
    all_books = []
    child_stats_list = []
    total_achievements = 0
    for child in children:
        books = load_child_books(conn, child["id"])
        achievement_count = _achievement_count(conn, child["id"])
        all_books.extend(books)
        total_achievements += achievement_count
        child_stats_list.append({
            **child_summary(child),
            "book_count": len(books),
            "achievement_count": achievement_count,
            "level": child_level(_finished_count(books), child["level_category"]).to_dict(),
        })
    genre_counts = Counter(book.genre for book in all_books)
    return {
        "family": {"id": family["id"], "name": family["name"]},
        "totals": {
            "children": len(children),
            "books": len(all_books),
            "achievements": total_achievements,
            "genres_discovered": len(genre_counts),
        },
        "monthly_stats": monthly_finished_counts(all_books, utc_now()),
        "genre_stats": [{"genre": genre, "count": count} for genre, count in genre_counts.items()],
        "child_stats": child_stats_list,
    }


@router.get("/leaderboard/{family_id}")
async def leaderboard(
    family_id: int,
    period: Optional[str] = Query(default="all"),
    conn = Depends(get_db),
):
    """Children ranked by books finished within the period."""
    if period not in LEADERBOARD_PERIODS:
        raise HTTPException(status_code=400, detail=f"Period must be one of {', '.join(LEADERBOARD_PERIODS)}")
    fetch_family(conn, family_id)
    cutoff = leaderboard_cutoff(period, utc_now())
    board = []
    for child in _family_children(conn, family_id):
        books = load_child_books(conn, child["id"])
        if cutoff is None:
            counted = books
        else:
            counted = [book for book in books if _finished_since(book.finish_date, cutoff)]
        board.append({
            **child_summary(child),
            "book_count": len(counted),
            "level": child_level(_finished_count(books), child["level_category"]).to_dict(),
        })
    board.sort(key=lambda entry: entry["book_count"], reverse=True)
    return {"period": period, "leaderboard": board}


def _finished_since(finish_date, cutoff) -> bool:
    moment = parse_moment(finish_date)
    if moment is None:
        return False
    if isinstance(moment, datetime):
        return moment >= cutoff
    return moment >= cutoff.date()
