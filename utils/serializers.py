from typing import Any, Dict, Optional

from fastapi import HTTPException


def book_to_dict(row) -> Dict[str, Any]:
    book = dict(row)
    book["recommended"] = bool(book.get("recommended"))
    return book


def family_settings_to_dict(row) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    settings = dict(row)
    settings["notifications"] = bool(settings["notifications"])
    settings["weekly_report"] = bool(settings["weekly_report"])
    return settings


def fetch_child(conn, child_id: int) -> Dict[str, Any]:
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM children WHERE id = ?", (child_id,))
    row = cursor.fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Child not found")
    return dict(row)


def fetch_family(conn, family_id: int) -> Dict[str, Any]:
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM families WHERE id = ?", (family_id,))
    row = cursor.fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Family not found")
    return dict(row)


def fetch_book(conn, book_id: int) -> Dict[str, Any]:
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM books WHERE id = ?", (book_id,))
    row = cursor.fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Book not found")
    return book_to_dict(row)


def child_summary(child: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": child["id"], "name": child["name"], "avatar": child["avatar"]}
