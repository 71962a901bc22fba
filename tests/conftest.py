import sqlite3

import pytest
import pytest_asyncio

from gamefinder.database import apply_schema, get_db

GAMES = [
    # id, name, description, min, max, created_by, group_id, public, created_at
    ("g1", "Test Scene", "Build a scene from one word", 2, 4, "u1", "grp1", 1, "2024-01-01 10:00:00"),
    ("g2", "Freeze Tag", "A warm-up to test focus", 3, 10, "u2", "grp2", 0, "2024-01-02 10:00:00"),
    ("g3", "Zip Zap Zop", "Pass the energy around the circle", 5, 20, "u2", "grp2", 1, "2024-01-03 10:00:00"),
    ("g4", "Private Thing", "Members only", 2, 2, "u1", "grp1", 0, "2024-01-04 10:00:00"),
]


async def _seed(db):
    await db.executemany(
        "INSERT INTO group_members (group_id, user_id, role) VALUES (?, ?, ?)",
        [("grp1", "u1", "organizer"), ("grp2", "u2", "organizer")],
    )
    await db.executemany(
        """INSERT INTO games (id, name, description, min_players, max_players,
                              created_by, group_id, public, created_at)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        GAMES,
    )
    await db.executemany(
        "INSERT INTO game_tags (id, name) VALUES (?, ?)",
        [("warm-up", "Warm-up"), ("character", "Character")],
    )
    await db.executemany(
        "INSERT INTO game_tag_associations (game_id, tag_id) VALUES (?, ?)",
        [("g1", "warm-up"), ("g1", "character"), ("g3", "warm-up")],
    )
    await db.executemany(
        "INSERT INTO event_games (event_id, game_id, order_index) VALUES (?, ?, ?)",
        [("e1", "g3", 0), ("e2", "g3", 0), ("e1", "g1", 1)],
    )
    await db.executemany(
        "INSERT INTO group_game_libraries (group_id, game_id) VALUES (?, ?)",
        [("grp1", "g2"), ("grp1", "g3")],
    )
    await db.execute(
        "INSERT INTO user_game_preferences (user_id, game_id, status) VALUES (?, ?, ?)",
        ("u1", "g3", "played"),
    )
    await db.commit()


@pytest_asyncio.fixture
async def db():
    """スキーマ適用済み・テストデータ投入済みのインメモリDB"""
    conn = await get_db(":memory:")
    try:
        try:
            await apply_schema(conn)
        except sqlite3.OperationalError as e:
            pytest.skip(f"SQLite build without FTS4: {e}")
        await _seed(conn)
        yield conn
    finally:
        await conn.close()
