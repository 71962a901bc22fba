"""DB初期化スクリプト: スキーマ適用 + タグ投入"""
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from gamefinder.config import settings
from gamefinder.database import init_db, seed_tags

logger = logging.getLogger(__name__)


async def main():
    logger.info(f"DB初期化中... ({settings.db_path})")
    await init_db()
    logger.info("許可タグを投入中...")
    count = await seed_tags()
    logger.info(f"完了 (タグ {count} 件)")


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    asyncio.run(main())
