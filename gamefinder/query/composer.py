"""ゲーム検索クエリの組み立て

FilterSetから (データクエリ, 件数クエリ) の組を生成する。
フィルタの値は必ず位置パラメータとして渡し、SQL文字列に埋め込むのは構造部分のみ。
"""
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from gamefinder.errors import QueryConstructionError
from gamefinder.models.search import FilterSet
from gamefinder.query.fragments import Predicate, active_predicates, like_pattern, match_term

logger = logging.getLogger(__name__)

GAME_COLUMNS = """g.id, g.name, g.description, g.min_players, g.max_players,
    g.created_at, g.created_by, g.group_id, g.public,
    GROUP_CONCAT(DISTINCT t.name) AS tags"""

RELEVANCE_SCORE = """(CASE
        WHEN g.name LIKE ? THEN 3
        WHEN g.description LIKE ? THEN 1
        ELSE 0
    END) AS relevance_score"""

EVENT_COUNT = "COUNT(DISTINCT eg.event_id) AS event_count"

FTS_JOIN = "JOIN games_fts ON games_fts.docid = g.rowid"

TAG_JOINS = """LEFT JOIN game_tag_associations gta ON g.id = gta.game_id
LEFT JOIN game_tags t ON gta.tag_id = t.id"""

EVENT_JOIN = "LEFT JOIN event_games eg ON g.id = eg.game_id"

SEARCH_ORDER = "ORDER BY relevance_score DESC, event_count DESC, g.created_at DESC"
DEFAULT_ORDER = "ORDER BY event_count DESC, g.created_at DESC"


class QueryPlan(BaseModel):
    """組み立て済みのクエリとパラメータ"""

    model_config = ConfigDict(frozen=True)

    query: str
    params: tuple[Any, ...]
    count_query: str | None = None
    count_params: tuple[Any, ...] = ()
    page: int = 1
    page_size: int = 0
    is_search_query: bool = False

    @property
    def is_paginated(self) -> bool:
        return self.page_size > 0

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def paged(self) -> tuple[str, tuple[Any, ...]]:
        """LIMIT/OFFSETを付与したデータクエリ（ページングなしならそのまま）"""
        if not self.is_paginated:
            return self.query, self.params
        return f"{self.query}\nLIMIT ? OFFSET ?", (*self.params, self.page_size, self.offset)


class ClauseAccumulator:
    """条件句を貯めて、先頭にWHERE、以降をANDでつなぐ"""

    def __init__(self):
        self._clauses: list[str] = []
        self._params: list[Any] = []
        self.has_predicate = False

    def add(self, predicate: Predicate) -> "ClauseAccumulator":
        self._clauses.append(predicate.clause)
        self._params.extend(predicate.params)
        self.has_predicate = True
        return self

    def extend(self, predicates: list[Predicate]) -> "ClauseAccumulator":
        for predicate in predicates:
            self.add(predicate)
        return self

    @property
    def params(self) -> tuple[Any, ...]:
        return tuple(self._params)

    def render(self) -> str:
        if not self.has_predicate:
            return ""
        return "WHERE " + "\n  AND ".join(self._clauses)


def check_placeholders(sql: str, params: tuple[Any, ...]) -> None:
    """プレースホルダ数とパラメータ数が一致しているか検証"""
    placeholders = sql.count("?")
    if placeholders != len(params):
        raise QueryConstructionError(
            f"placeholder/parameter mismatch: {placeholders} placeholders, {len(params)} params"
        )


def _join_sql(*parts: str) -> str:
    return "\n".join(p for p in parts if p)


def compose(filters: FilterSet) -> QueryPlan:
    """FilterSetから検索用のQueryPlanを生成"""
    if filters.public_only and filters.user_id:
        # 両方指定すると「公開かつ所属グループ」の積集合になる
        logger.warning("public_only and user context combined; results are their intersection")

    is_search = bool(filters.search)
    where = ClauseAccumulator().extend(active_predicates(filters))

    if is_search:
        score_params = (like_pattern(filters.search), like_pattern(filters.search))
        select = f"SELECT {GAME_COLUMNS},\n    {RELEVANCE_SCORE},\n    {EVENT_COUNT}"
        joins = _join_sql(FTS_JOIN, TAG_JOINS, EVENT_JOIN)
        count_from = _join_sql("FROM games g", FTS_JOIN)
        order = SEARCH_ORDER
    else:
        score_params = ()
        select = f"SELECT {GAME_COLUMNS},\n    {EVENT_COUNT}"
        joins = _join_sql(TAG_JOINS, EVENT_JOIN)
        count_from = "FROM games g"
        order = DEFAULT_ORDER

    query = _join_sql(select, "FROM games g", joins, where.render(), "GROUP BY g.id", order)
    count_query = _join_sql("SELECT COUNT(DISTINCT g.id)", count_from, where.render())
    params = (*score_params, *where.params)

    check_placeholders(query, params)
    check_placeholders(count_query, where.params)

    logger.debug("composed game query (search=%s, params=%d)", is_search, len(params))
    return QueryPlan(
        query=query,
        params=params,
        count_query=count_query,
        count_params=where.params,
        page=filters.page,
        page_size=filters.page_size,
        is_search_query=is_search,
    )


def compose_unrated(user_id: str, search: str | None = None, limit: int = 10) -> QueryPlan:
    """所属グループのライブラリにあり、ユーザーがまだステータスを付けていないゲーム"""
    is_search = bool(search)
    where = ClauseAccumulator()
    where.add(Predicate(name="member", clause="gm.user_id = ?", params=(user_id,)))
    where.add(Predicate(name="unrated", clause="ugp.status IS NULL"))
    if is_search:
        where.add(Predicate(name="search", clause="games_fts MATCH ?", params=(match_term(search),)))

    if is_search:
        score_params = (like_pattern(search), like_pattern(search))
        select = f"SELECT {GAME_COLUMNS},\n    {RELEVANCE_SCORE},\n    {EVENT_COUNT}"
        order = SEARCH_ORDER
    else:
        score_params = ()
        select = f"SELECT {GAME_COLUMNS},\n    {EVENT_COUNT}"
        order = DEFAULT_ORDER

    query = _join_sql(
        select,
        "FROM games g",
        FTS_JOIN if is_search else "",
        "JOIN group_game_libraries ggl ON g.id = ggl.game_id",
        "JOIN group_members gm ON ggl.group_id = gm.group_id",
        TAG_JOINS,
        "LEFT JOIN user_game_preferences ugp ON g.id = ugp.game_id AND ugp.user_id = ?",
        EVENT_JOIN,
        where.render(),
        "GROUP BY g.id",
        order,
        "LIMIT ?",
    )
    params = (*score_params, user_id, *where.params, limit)
    check_placeholders(query, params)

    return QueryPlan(query=query, params=params, is_search_query=is_search)


def compose_game_lookup(game_id: str, user_id: str) -> QueryPlan:
    """1件取得用: 公開・作成者・所属グループのいずれかでなければヒットしない"""
    where = ClauseAccumulator()
    where.add(Predicate(name="game", clause="g.id = ?", params=(game_id,)))
    where.add(Predicate(
        name="access",
        clause=(
            "(g.public = TRUE OR g.created_by = ?"
            " OR g.group_id IN (SELECT group_id FROM group_members WHERE user_id = ?))"
        ),
        params=(user_id, user_id),
    ))

    query = _join_sql(
        f"SELECT {GAME_COLUMNS},\n    {EVENT_COUNT}",
        "FROM games g",
        TAG_JOINS,
        EVENT_JOIN,
        where.render(),
        "GROUP BY g.id",
    )
    check_placeholders(query, where.params)
    return QueryPlan(query=query, params=where.params)
