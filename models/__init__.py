from .family import Family, FamilyCreate, FamilyUpdate
from .child import ChildCreate, ChildUpdate, LevelCategory
from .book import BookCreate, BookUpdate, BookStatus, Genre
from .reading_session import ReadingSessionCreate

__all__ = [
    'Family', 'FamilyCreate', 'FamilyUpdate',
    'ChildCreate', 'ChildUpdate', 'LevelCategory',
    'BookCreate', 'BookUpdate', 'BookStatus', 'Genre',
    'ReadingSessionCreate',
]
