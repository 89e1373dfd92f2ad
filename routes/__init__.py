# Routes package __init__.py - re-exports routers for main.py convenience
from .families import router as families_router
from .children import router as children_router
from .books import router as books_router
from .reading_logs import router as reading_logs_router
from .achievements import router as achievements_router
from .stats import router as stats_router
from .map import router as map_router
from .admin import router as admin_router

__all__ = [
    'families_router', 'children_router', 'books_router', 'reading_logs_router',
    'achievements_router', 'stats_router', 'map_router', 'admin_router',
]
