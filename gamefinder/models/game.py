from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# ゲームに付与できるタグ（固定語彙）
ALLOWED_TAGS = (
    "Warm-up",
    "Short-form",
    "Long-form",
    "Character",
    "Environment",
    "Narrative",
    "Physical",
    "Verbal",
    "Musical",
    "Introduction",
    "High-energy",
    "Low-energy",
    "Performance",
    "Practice",
    "Beginner-friendly",
    "Advanced",
    "Solo",
    "Group",
    "Quick",
    "Audience-interaction",
)


def split_tags(value: str | list[str] | None) -> list[str]:
    """GROUP_CONCATのカンマ区切り文字列を重複なしのタグ一覧に変換"""
    if value is None:
        return []
    parts = value.split(",") if isinstance(value, str) else value
    return list(dict.fromkeys(p.strip() for p in parts if p and p.strip()))


class GameItem(BaseModel):
    """検索結果の1件"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    name: str
    description: str = ""
    min_players: int
    max_players: int
    created_at: datetime
    created_by: str
    group_id: str
    public: bool = False
    tags: list[str] = []
    event_count: int = 0
    relevance_score: int | None = None  # 検索時のみ

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, v):
        return "" if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, v):
        return split_tags(v)
