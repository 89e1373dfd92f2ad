# SQL schema for Passaporte do Leitor database

SCHEMA_VERSION = 3

SCHEMA_SQL = """
-- Families
CREATE TABLE IF NOT EXISTS families (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Family settings (one row per family)
CREATE TABLE IF NOT EXISTS family_settings (
    family_id INTEGER PRIMARY KEY,
    language TEXT NOT NULL DEFAULT 'pt-PT',
    notifications INTEGER NOT NULL DEFAULT 1,
    weekly_report INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (family_id) REFERENCES families (id) ON DELETE CASCADE
);

-- Children
CREATE TABLE IF NOT EXISTS children (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    family_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    avatar TEXT NOT NULL DEFAULT '🧒',
    birth_year INTEGER,
    level_category TEXT NOT NULL DEFAULT 'EXPLORERS' CHECK(level_category IN ('MAGIC', 'EXPLORERS', 'KNIGHTS', 'SPACE')),
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (family_id) REFERENCES families (id) ON DELETE CASCADE
);

-- Books
CREATE TABLE IF NOT EXISTS books (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    child_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    author TEXT NOT NULL DEFAULT 'Desconhecido',
    isbn TEXT,
    genre TEXT NOT NULL,
    total_pages INTEGER,
    status TEXT NOT NULL DEFAULT 'to-read' CHECK(status IN ('to-read', 'reading', 'finished')),
    current_page INTEGER,
    start_date TEXT,
    finish_date TEXT,
    rating INTEGER CHECK(rating IS NULL OR rating BETWEEN 1 AND 5),
    notes TEXT,
    favorite_character TEXT,
    recommended INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (child_id) REFERENCES children (id) ON DELETE CASCADE
);

-- Reading sessions
CREATE TABLE IF NOT EXISTS reading_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    child_id INTEGER NOT NULL,
    book_id INTEGER,
    minutes INTEGER NOT NULL CHECK(minutes >= 1),
    pages INTEGER NOT NULL DEFAULT 0,
    mood INTEGER CHECK(mood IS NULL OR mood BETWEEN 1 AND 5),
    date TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (child_id) REFERENCES children (id) ON DELETE CASCADE,
    FOREIGN KEY (book_id) REFERENCES books (id) ON DELETE SET NULL
);

-- Achievement catalog
CREATE TABLE IF NOT EXISTS achievements (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT UNIQUE NOT NULL,
    name TEXT NOT NULL,
    description TEXT NOT NULL,
    icon TEXT NOT NULL,
    category TEXT NOT NULL CHECK(category IN ('READING', 'GENRE', 'STREAK', 'SPECIAL')),
    requirements TEXT NOT NULL
);

-- Earned achievements (one fact per child/achievement pair)
CREATE TABLE IF NOT EXISTS child_achievements (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    child_id INTEGER NOT NULL,
    achievement_id INTEGER NOT NULL,
    earned_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE (child_id, achievement_id),
    FOREIGN KEY (child_id) REFERENCES children (id) ON DELETE CASCADE,
    FOREIGN KEY (achievement_id) REFERENCES achievements (id) ON DELETE CASCADE
);
"""

# Indexes for performance
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_children_family ON children (family_id);
CREATE INDEX IF NOT EXISTS idx_books_child ON books (child_id);
CREATE INDEX IF NOT EXISTS idx_books_child_status ON books (child_id, status);
CREATE INDEX IF NOT EXISTS idx_books_finish_date ON books (finish_date);
CREATE INDEX IF NOT EXISTS idx_reading_sessions_child ON reading_sessions (child_id);
CREATE INDEX IF NOT EXISTS idx_reading_sessions_date ON reading_sessions (date);
CREATE INDEX IF NOT EXISTS idx_child_achievements_child ON child_achievements (child_id);
"""
