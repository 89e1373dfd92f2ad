from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Set

from utils.achievements import Achievement, evaluate
from utils.records import BookRecord, SessionRecord

logger = logging.getLogger(__name__)


def load_child_books(conn, child_id: int) -> List[BookRecord]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, genre, status, rating, finish_date
        FROM books
        WHERE child_id = ?
        """,
        (child_id,),
    )
    return [BookRecord.from_row(row) for row in cursor.fetchall()]


def load_child_sessions(conn, child_id: int) -> List[SessionRecord]:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT date, minutes FROM reading_sessions WHERE child_id = ?",
        (child_id,),
    )
    sessions = []
    for row in cursor.fetchall():
        session = SessionRecord.from_row(row)
        if session is not None:
            sessions.append(session)
    return sessions


def load_earned_codes(conn, child_id: int) -> Set[str]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT a.code
        FROM child_achievements ca
        JOIN achievements a ON a.id = ca.achievement_id
        WHERE ca.child_id = ?
        """,
        (child_id,),
    )
    return {row[0] for row in cursor.fetchall()}


def load_catalog(conn) -> List[Achievement]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, code, name, description, icon, category, requirements
        FROM achievements
        ORDER BY id
        """
    )
    return [Achievement.from_row(row) for row in cursor.fetchall()]


def count_finished_books(conn, child_id: int) -> int:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT COUNT(*) FROM books WHERE child_id = ? AND status = 'finished'",
        (child_id,),
    )
    return int(cursor.fetchone()[0] or 0)


def record_award(conn, child_id: int, achievement_id: int) -> bool:
    """Record that a child earned an achievement. False if it was already recorded."""
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT OR IGNORE INTO child_achievements (child_id, achievement_id)
        VALUES (?, ?)
        """,
        (child_id, achievement_id),
    )
    if cursor.rowcount == 0:
        logger.debug("Child %s already holds achievement %s", child_id, achievement_id)
        return False
    return True


def check_and_award(conn, child_id: int, now: Optional[datetime] = None) -> List[Achievement]:
    """Evaluate the catalog for a child, persist new awards and return them."""
    books = load_child_books(conn, child_id)
    earned_codes = load_earned_codes(conn, child_id)
    catalog = load_catalog(conn)

    newly_earned = [
        achievement
        for achievement in evaluate(books, earned_codes, catalog, now=now)
        if record_award(conn, child_id, achievement.id)
    ]
    conn.commit()
    if newly_earned:
        logger.info("Child %s earned: %s", child_id, [a.code for a in newly_earned])
    return newly_earned
