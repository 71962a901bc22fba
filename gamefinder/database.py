from pathlib import Path

import aiosqlite

from gamefinder.config import settings
from gamefinder.models.game import ALLOWED_TAGS

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "db" / "schema.sql"


async def get_db(db_path: Path | str | None = None) -> aiosqlite.Connection:
    """DBコネクションを取得"""
    path = str(db_path or settings.db_path)
    db = await aiosqlite.connect(path)
    db.row_factory = aiosqlite.Row
    if path != ":memory:":
        await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")
    return db


async def apply_schema(db: aiosqlite.Connection) -> None:
    """既存コネクションにスキーマを適用"""
    schema = SCHEMA_PATH.read_text(encoding="utf-8")
    await db.executescript(schema)
    await db.commit()


async def init_db():
    """スキーマを適用してDBを初期化"""
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    db = await get_db()
    try:
        await apply_schema(db)
    finally:
        await db.close()


async def seed_tags() -> int:
    """許可タグ一覧をDBに投入"""
    db = await get_db()
    try:
        for name in ALLOWED_TAGS:
            await db.execute(
                "INSERT OR IGNORE INTO game_tags (id, name) VALUES (?, ?)",
                (name.lower(), name),
            )
        await db.commit()
    finally:
        await db.close()
    return len(ALLOWED_TAGS)
