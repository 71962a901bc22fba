"""検索の実行: 件数クエリ → データクエリ → GameItemへの変換 → レスポンス封筒"""
import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Any

import aiosqlite
from pydantic import ValidationError

from gamefinder.config import settings
from gamefinder.database import get_db
from gamefinder.errors import GameSearchError, MappingError, StoreExecutionError
from gamefinder.models.game import GameItem
from gamefinder.models.search import FilterSet, SearchResponse
from gamefinder.pagination import calculate_pagination
from gamefinder.query.composer import QueryPlan, compose, compose_game_lookup, compose_unrated

logger = logging.getLogger(__name__)


def map_row(row: Any, is_search: bool) -> GameItem:
    """DB行をGameItemに変換（検索時のみrelevance_scoreを保持）"""
    try:
        data = dict(row)
    except (TypeError, ValueError) as e:
        raise MappingError(f"game row is not a mapping: {row!r}") from e
    if not is_search:
        data.pop("relevance_score", None)
    try:
        return GameItem.model_validate(data)
    except ValidationError as e:
        raise MappingError(f"could not map game row {data.get('id')!r}: {e}") from e


class SearchExecutor:
    """QueryPlanをDBに対して実行する"""

    def __init__(self, db: aiosqlite.Connection, timeout: float | None = None):
        self.db = db
        self.timeout = settings.query_timeout_seconds if timeout is None else timeout

    async def _fetchone(self, sql: str, params: tuple) -> Any:
        try:
            cursor = await self.db.execute(sql, params)
            return await cursor.fetchone()
        except (sqlite3.Error, ValueError) as e:
            # ValueErrorは閉じたコネクションへの実行
            raise StoreExecutionError(str(e)) from e

    async def _fetchall(self, sql: str, params: tuple) -> list:
        try:
            cursor = await self.db.execute(sql, params)
            return await cursor.fetchall()
        except (sqlite3.Error, ValueError) as e:
            raise StoreExecutionError(str(e)) from e

    async def _bounded(self, coro):
        # キャンセルはそのまま呼び出し元へ伝播させる
        if not self.timeout or self.timeout <= 0:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise StoreExecutionError(f"query timed out after {self.timeout}s") from e

    async def count(self, plan: QueryPlan) -> int:
        row = await self._fetchone(plan.count_query, plan.count_params)
        return int(row[0]) if row is not None and row[0] is not None else 0

    async def fetch_items(self, plan: QueryPlan) -> list[GameItem]:
        sql, params = plan.paged()
        rows = await self._fetchall(sql, params)
        return [map_row(row, plan.is_search_query) for row in rows]

    async def _execute(self, plan: QueryPlan) -> SearchResponse:
        total = await self.count(plan)
        items = await self.fetch_items(plan)
        return SearchResponse(
            success=True,
            data=items,
            pagination=calculate_pagination(total, plan.page, plan.page_size),
        )

    async def run(self, plan: QueryPlan) -> SearchResponse:
        """QueryPlanを実行（失敗時はGameSearchErrorを送出）"""
        return await self._bounded(self._execute(plan))

    async def search(self, filters: FilterSet) -> SearchResponse:
        """FilterSetで検索し、失敗時は success=False の封筒を返す"""
        try:
            plan = compose(filters)
            return await self.run(plan)
        except GameSearchError as e:
            logger.error(f"Game search failed ({type(e).__name__}): {e}")
            return SearchResponse.failure("Error fetching games")

    async def get_game(self, game_id: str, user_id: str) -> GameItem | None:
        """IDでゲームを1件取得（閲覧権限がなければNone）"""
        plan = compose_game_lookup(game_id, user_id)
        row = await self._bounded(self._fetchone(plan.query, plan.params))
        if row is None:
            return None
        return map_row(row, is_search=False)

    async def unrated(self, user_id: str, search: str | None = None) -> SearchResponse:
        """未評価ゲーム一覧（ページングなし）"""
        try:
            plan = compose_unrated(user_id, search, limit=settings.unrated_limit)
            rows = await self._bounded(self._fetchall(plan.query, plan.params))
            items = [map_row(row, plan.is_search_query) for row in rows]
        except GameSearchError as e:
            logger.error(f"Unrated games lookup failed ({type(e).__name__}): {e}")
            return SearchResponse.failure("Error fetching unrated games")
        return SearchResponse(success=True, data=items)


async def search_games(filters: FilterSet, db_path: Path | str | None = None) -> SearchResponse:
    """コネクションを開いて検索し、閉じる"""
    db = await get_db(db_path)
    try:
        return await SearchExecutor(db).search(filters)
    finally:
        await db.close()
