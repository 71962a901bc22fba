"""検索条件の部品: 各フィルタを「条件句 + 位置パラメータ」として表現する"""
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from gamefinder.models.search import FilterSet


class Predicate(BaseModel):
    """WHERE/ANDを含まない条件句と、そのパラメータ"""

    model_config = ConfigDict(frozen=True)

    name: str
    clause: str
    params: tuple[Any, ...] = ()


def like_pattern(term: str) -> str:
    return f"%{term}%"


def match_term(term: str) -> str:
    """前方一致用のワイルドカード付き検索語"""
    return f"{term}*"


def search_match(filters: FilterSet) -> Predicate | None:
    if not filters.search:
        return None
    return Predicate(
        name="search",
        clause="games_fts MATCH ?",
        params=(match_term(filters.search),),
    )


def public_only(filters: FilterSet) -> Predicate | None:
    if not filters.public_only:
        return None
    return Predicate(name="public_only", clause="g.public = TRUE")


def user_context(filters: FilterSet) -> Predicate | None:
    # 公開ゲーム + 所属グループのゲーム
    if not filters.user_id:
        return None
    return Predicate(
        name="user",
        clause=(
            "(g.public = TRUE"
            " OR g.group_id IN (SELECT group_id FROM group_members WHERE user_id = ?))"
        ),
        params=(filters.user_id,),
    )


def library(filters: FilterSet) -> Predicate | None:
    if not filters.library_id:
        return None
    return Predicate(
        name="library",
        clause="g.id IN (SELECT game_id FROM group_game_libraries WHERE group_id = ?)",
        params=(filters.library_id,),
    )


def tag(filters: FilterSet) -> Predicate | None:
    if not filters.tag:
        return None
    return Predicate(
        name="tag",
        clause=(
            "g.id IN (SELECT game_id FROM game_tag_associations gta"
            " JOIN game_tags t ON gta.tag_id = t.id"
            " WHERE t.name = ?)"
        ),
        params=(filters.tag,),
    )


def group_owner(filters: FilterSet) -> Predicate | None:
    if not filters.owned_by_group:
        return None
    return Predicate(
        name="group_owner",
        clause="g.group_id = ?",
        params=(filters.owned_by_group,),
    )


# 適用順はパラメータ順と一致させる
FRAGMENTS: tuple[Callable[[FilterSet], Predicate | None], ...] = (
    search_match,
    public_only,
    user_context,
    library,
    tag,
    group_owner,
)


def active_predicates(filters: FilterSet) -> list[Predicate]:
    """FilterSetから有効な条件句を固定順で取り出す"""
    return [p for p in (fragment(filters) for fragment in FRAGMENTS) if p is not None]
