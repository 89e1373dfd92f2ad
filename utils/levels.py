from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class Level:
    rank: int
    name: str
    min_value: int
    icon: str = ""
    color: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "name": self.name,
            "min_books": self.min_value,
            "icon": self.icon,
            "color": self.color,
        }


@dataclass(frozen=True)
class LevelProgress:
    current: Level
    next: Optional[Level]
    fraction: float
    value: int

    @property
    def percent(self) -> int:
        return round(self.fraction * 100)

    @property
    def to_next_level(self) -> int:
        if self.next is None:
            return 0
        return self.next.min_value - self.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current.to_dict(),
            "next": self.next.to_dict() if self.next else None,
            "progress": self.percent,
            "books_to_next_level": self.to_next_level,
        }


LEVEL_THRESHOLDS = (0, 3, 7, 12, 20, 30)

_LEVEL_COLORS = ("#BDC3C7", "#85C1E9", "#82E0AA", "#F9E79F", "#F5B041", "#AF7AC5")


def _ladder(entries: Sequence[tuple]) -> List[Level]:
    return [
        Level(rank=rank, name=name, min_value=threshold, icon=icon, color=color)
        for rank, ((name, icon), threshold, color) in enumerate(
            zip(entries, LEVEL_THRESHOLDS, _LEVEL_COLORS), start=1
        )
    ]


LEVEL_CATEGORIES: Dict[str, Dict[str, Any]] = {
    "MAGIC": {
        "name": "Magia",
        "description": "Torna-te um poderoso mago!",
        "icon": "🪄",
        "levels": _ladder([
            ("Aprendiz", "✨"), ("Feiticeiro", "🪄"), ("Mago", "🧙"),
            ("Arquimago", "🔮"), ("Grão-Mestre", "👑"), ("Lenda", "⭐"),
        ]),
    },
    "EXPLORERS": {
        "name": "Exploradores",
        "description": "Descobre novos mundos!",
        "icon": "🧭",
        "levels": _ladder([
            ("Curioso", "🐣"), ("Explorador", "🧭"), ("Aventureiro", "🎒"),
            ("Descobridor", "🗺️"), ("Navegador", "⛵"), ("Lenda", "🌟"),
        ]),
    },
    "KNIGHTS": {
        "name": "Cavaleiros",
        "description": "Luta pela honra e glória!",
        "icon": "⚔️",
        "levels": _ladder([
            ("Escudeiro", "🛡️"), ("Cavaleiro", "⚔️"), ("Paladino", "🗡️"),
            ("Campeão", "🏅"), ("Guardião", "🦁"), ("Lenda", "👑"),
        ]),
    },
    "SPACE": {
        "name": "Espaço",
        "description": "Explora o universo!",
        "icon": "🚀",
        "levels": _ladder([
            ("Cadete", "🌙"), ("Astronauta", "👨‍🚀"), ("Piloto", "🚀"),
            ("Comandante", "🛸"), ("Almirante", "🌟"), ("Lenda Estelar", "✨"),
        ]),
    },
}

DEFAULT_LEVEL_CATEGORY = "EXPLORERS"


def levels_for_category(category: Optional[str]) -> List[Level]:
    entry = LEVEL_CATEGORIES.get((category or "").upper(), LEVEL_CATEGORIES[DEFAULT_LEVEL_CATEGORY])
    return entry["levels"]


def level_progress(value: int, levels: Sequence[Level]) -> LevelProgress:
    """Place ``value`` on an ascending ladder of levels.

    The current level is the highest one whose minimum does not exceed the
    value (the first level when the value is below all of them). The fraction
    toward the next level is clamped to [0, 1] and is 1 at the top.
    """
    if not levels:
        raise ValueError("At least one level is required")
    ordered = sorted(levels, key=lambda level: level.min_value)
    index = 0
    for position, level in enumerate(ordered):
        if level.min_value <= value:
            index = position
    current = ordered[index]
    next_level = ordered[index + 1] if index + 1 < len(ordered) else None
    if next_level is None:
        fraction = 1.0
    else:
        span = next_level.min_value - current.min_value
        fraction = (value - current.min_value) / span if span > 0 else 0.0
        fraction = min(1.0, max(0.0, fraction))
    return LevelProgress(current=current, next=next_level, fraction=fraction, value=value)


def child_level(finished_books: int, category: Optional[str]) -> LevelProgress:
    return level_progress(finished_books, levels_for_category(category))
