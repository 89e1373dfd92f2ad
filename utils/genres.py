from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from utils.records import BookRecord


@dataclass(frozen=True)
class GenreDescriptor:
    code: str
    name: str
    icon: str
    theme: str
    color: str


@dataclass(frozen=True)
class GenreProgress:
    genre: GenreDescriptor
    count: int

    @property
    def discovered(self) -> bool:
        return self.count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "genre": self.genre.code,
            "name": self.genre.name,
            "icon": self.genre.icon,
            "theme": self.genre.theme,
            "color": self.genre.color,
            "count": self.count,
            "discovered": self.discovered,
        }


# Map regions, in the order they are drawn.
GENRE_CATALOG: List[GenreDescriptor] = [
    GenreDescriptor("FANTASIA", "Fantasia", "🏰", "Reino Mágico", "#9B59B6"),
    GenreDescriptor("AVENTURA", "Aventura", "🗺️", "Terras Selvagens", "#E67E22"),
    GenreDescriptor("ESPACO", "Espaço", "🚀", "Galáxia Infinita", "#2C3E50"),
    GenreDescriptor("NATUREZA", "Natureza", "🌲", "Floresta Encantada", "#27AE60"),
    GenreDescriptor("MISTERIO", "Mistério", "🔍", "Vale das Sombras", "#34495E"),
    GenreDescriptor("OCEANO", "Oceano", "🌊", "Mar dos Piratas", "#3498DB"),
    GenreDescriptor("CIENCIA", "Ciência", "🔬", "Laboratório Secreto", "#1ABC9C"),
    GenreDescriptor("HISTORIA", "História", "📜", "Ruínas Antigas", "#795548"),
]

GENRE_CODES = tuple(descriptor.code for descriptor in GENRE_CATALOG)


def aggregate(
    books: Iterable[BookRecord],
    genre_catalog: Sequence[GenreDescriptor] = GENRE_CATALOG,
) -> List[GenreProgress]:
    """One progress entry per catalog genre, in catalog order.

    Books whose genre is not in the catalog are ignored.
    """
    counts = Counter(book.genre for book in books)
    return [GenreProgress(genre=descriptor, count=counts.get(descriptor.code, 0)) for descriptor in genre_catalog]


def favorite_genre(books: Iterable[BookRecord]) -> Optional[str]:
    """Most-read genre; ties go to the genre seen first."""
    counts = Counter(book.genre for book in books if book.genre)
    if not counts:
        return None
    return counts.most_common(1)[0][0]
