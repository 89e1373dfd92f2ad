"""Achievement rule evaluation.

Requirement descriptors are stored as JSON blobs on the catalog rows, e.g.
``{"type": "genre_books", "genre": "FANTASIA", "value": 5}``. They are parsed
into one frozen dataclass per requirement kind and evaluated against a
snapshot of a child's books. Evaluation is pure: persisting the results is
the caller's job (see ``utils.awards``).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from utils.records import BookRecord, as_utc, utc_date, utc_now

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

SEED_ACHIEVEMENTS: List[Dict[str, Any]] = [
    {
        "code": "primeiro-livro",
        "name": "Primeiro Passo",
        "description": "Leu o primeiro livro",
        "icon": "📖",
        "category": "READING",
        "requirements": {"type": "book_count", "value": 1},
    },
    {
        "code": "cinco-livros",
        "name": "Leitor Dedicado",
        "description": "Leu 5 livros",
        "icon": "📚",
        "category": "READING",
        "requirements": {"type": "book_count", "value": 5},
    },
    {
        "code": "dez-livros",
        "name": "Devorador de Histórias",
        "description": "Leu 10 livros",
        "icon": "🏆",
        "category": "READING",
        "requirements": {"type": "book_count", "value": 10},
    },
    {
        "code": "vinte-livros",
        "name": "Bibliotecário",
        "description": "Leu 20 livros",
        "icon": "🎖️",
        "category": "READING",
        "requirements": {"type": "book_count", "value": 20},
    },
    {
        "code": "cinquenta-livros",
        "name": "Lenda Literária",
        "description": "Leu 50 livros",
        "icon": "👑",
        "category": "READING",
        "requirements": {"type": "book_count", "value": 50},
    },
    {
        "code": "explorador-generos",
        "name": "Explorador de Géneros",
        "description": "Leu livros de 3 géneros diferentes",
        "icon": "🌈",
        "category": "GENRE",
        "requirements": {"type": "genre_count", "value": 3},
    },
    {
        "code": "mestre-generos",
        "name": "Mestre dos Mundos",
        "description": "Leu livros de 6 géneros diferentes",
        "icon": "🌍",
        "category": "GENRE",
        "requirements": {"type": "genre_count", "value": 6},
    },
    {
        "code": "todos-generos",
        "name": "Conquistador Total",
        "description": "Leu livros de todos os géneros",
        "icon": "⭐",
        "category": "GENRE",
        "requirements": {"type": "genre_count", "value": 8},
    },
    {
        "code": "super-leitor",
        "name": "Super Leitor",
        "description": "Leu 3 livros no mesmo mês",
        "icon": "🚀",
        "category": "STREAK",
        "requirements": {"type": "monthly_books", "value": 3},
    },
    {
        "code": "critico",
        "name": "Crítico Literário",
        "description": "Avaliou 10 livros",
        "icon": "⭐",
        "category": "SPECIAL",
        "requirements": {"type": "rated_books", "value": 10},
    },
    {
        "code": "fantasista",
        "name": "Sonhador",
        "description": "Leu 5 livros de Fantasia",
        "icon": "🏰",
        "category": "GENRE",
        "requirements": {"type": "genre_books", "genre": "FANTASIA", "value": 5},
    },
    {
        "code": "astronauta",
        "name": "Astronauta",
        "description": "Leu 5 livros de Espaço",
        "icon": "🚀",
        "category": "GENRE",
        "requirements": {"type": "genre_books", "genre": "ESPACO", "value": 5},
    },
    {
        "code": "naturalista",
        "name": "Amigo da Natureza",
        "description": "Leu 5 livros de Natureza",
        "icon": "🌲",
        "category": "GENRE",
        "requirements": {"type": "genre_books", "genre": "NATUREZA", "value": 5},
    },
    {
        "code": "pirata",
        "name": "Lobo do Mar",
        "description": "Leu 5 livros de Oceano",
        "icon": "🏴‍☠️",
        "category": "GENRE",
        "requirements": {"type": "genre_books", "genre": "OCEANO", "value": 5},
    },
    {
        "code": "detetive",
        "name": "Detetive",
        "description": "Leu 5 livros de Mistério",
        "icon": "🔍",
        "category": "GENRE",
        "requirements": {"type": "genre_books", "genre": "MISTERIO", "value": 5},
    },
]

# ---------------------------------------------------------------------------
# Requirement variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BookCount:
    value: int


@dataclass(frozen=True)
class GenreCount:
    value: int


@dataclass(frozen=True)
class GenreBooks:
    genre: str
    value: int


@dataclass(frozen=True)
class RatedBooks:
    value: int


@dataclass(frozen=True)
class MonthlyBooks:
    value: int


@dataclass(frozen=True)
class UnknownRequirement:
    """Anything the evaluator does not recognise. Never earned."""

    type: Optional[str]
    raw: Any = None


Requirement = Union[BookCount, GenreCount, GenreBooks, RatedBooks, MonthlyBooks, UnknownRequirement]

_SIMPLE_KINDS = {
    "book_count": BookCount,
    "genre_count": GenreCount,
    "rated_books": RatedBooks,
    "monthly_books": MonthlyBooks,
}


def _threshold(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def parse_requirement(raw: Union[str, Mapping[str, Any], None]) -> Requirement:
    """Parse a stored descriptor (JSON text or mapping) into a requirement variant."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return UnknownRequirement(type=None, raw=raw)
    if not isinstance(raw, Mapping):
        return UnknownRequirement(type=None, raw=raw)
    kind = raw.get("type")
    value = _threshold(raw.get("value"))
    if value is None:
        return UnknownRequirement(type=kind, raw=dict(raw))
    if kind in _SIMPLE_KINDS:
        return _SIMPLE_KINDS[kind](value=value)
    if kind == "genre_books":
        genre = raw.get("genre")
        if isinstance(genre, str) and genre:
            return GenreBooks(genre=genre, value=value)
    return UnknownRequirement(type=kind, raw=dict(raw))


def requirement_to_dict(requirement: Requirement) -> Dict[str, Any]:
    if isinstance(requirement, UnknownRequirement):
        return dict(requirement.raw) if isinstance(requirement.raw, Mapping) else {"type": requirement.type}
    kind = next(
        (name for name, variant in _SIMPLE_KINDS.items() if isinstance(requirement, variant)),
        "genre_books",
    )
    data: Dict[str, Any] = {"type": kind, "value": requirement.value}
    if isinstance(requirement, GenreBooks):
        data["genre"] = requirement.genre
    return data


@dataclass(frozen=True)
class Achievement:
    code: str
    name: str
    requirement: Requirement
    description: str = ""
    icon: str = ""
    category: str = "READING"
    id: Optional[int] = field(default=None, compare=False)

    @classmethod
    def from_seed(cls, seed: Mapping[str, Any]) -> "Achievement":
        return cls(
            code=seed["code"],
            name=seed["name"],
            description=seed.get("description", ""),
            icon=seed.get("icon", ""),
            category=seed.get("category", "READING"),
            requirement=parse_requirement(seed.get("requirements")),
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Achievement":
        return cls(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            description=row["description"],
            icon=row["icon"],
            category=row["category"],
            requirement=parse_requirement(row["requirements"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "category": self.category,
            "requirements": requirement_to_dict(self.requirement),
        }


def seed_catalog() -> List[Achievement]:
    return [Achievement.from_seed(seed) for seed in SEED_ACHIEVEMENTS]


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def finished_in_month(book: BookRecord, now: datetime) -> bool:
    """True when the book's finish date falls in now's calendar month (UTC)."""
    finished_on = utc_date(book.finish_date)
    if finished_on is None:
        return False
    return finished_on.year == now.year and finished_on.month == now.month


def requirement_met(requirement: Requirement, books: Sequence[BookRecord], now: datetime) -> bool:
    if isinstance(requirement, BookCount):
        return len(books) >= requirement.value
    if isinstance(requirement, GenreCount):
        return len({book.genre for book in books if book.genre}) >= requirement.value
    if isinstance(requirement, GenreBooks):
        return sum(1 for book in books if book.genre == requirement.genre) >= requirement.value
    if isinstance(requirement, RatedBooks):
        return sum(1 for book in books if book.rating is not None) >= requirement.value
    if isinstance(requirement, MonthlyBooks):
        return sum(1 for book in books if finished_in_month(book, now)) >= requirement.value
    logger.debug("Skipping unrecognised requirement %r", requirement)
    return False


def evaluate(
    books: Iterable[BookRecord],
    already_earned: Iterable[str],
    catalog: Iterable[Achievement],
    *,
    now: Optional[datetime] = None,
) -> List[Achievement]:
    """Return catalog achievements newly qualified by ``books``, in catalog order.

    Codes in ``already_earned`` are never returned again. ``now`` defaults to
    the current UTC time and only matters for ``monthly_books``.
    """
    moment = as_utc(now) if now is not None else utc_now()
    snapshot = list(books)
    earned = set(already_earned)
    qualified: List[Achievement] = []
    for achievement in catalog:
        if achievement.code in earned:
            continue
        if requirement_met(achievement.requirement, snapshot, moment):
            qualified.append(achievement)
            earned.add(achievement.code)
    return qualified
