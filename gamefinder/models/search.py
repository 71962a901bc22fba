from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from gamefinder.models.game import GameItem


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class FilterSet(BaseModel):
    """1回の検索に渡す条件一式"""

    model_config = ConfigDict(frozen=True)

    search: str | None = None
    user_id: str | None = None
    tag: str | None = None
    library_id: str | None = None
    owned_by_group: str | None = None
    public_only: bool = False
    page: int = 1
    page_size: int = 0  # 0 = ページングなし

    @field_validator("search", "user_id", "tag", "library_id", "owned_by_group", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("page", mode="before")
    @classmethod
    def _resolve_page(cls, v):
        return _positive_int(v, 1)

    @field_validator("page_size", mode="before")
    @classmethod
    def _resolve_page_size(cls, v):
        return _positive_int(v, 0)


class PaginationMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    page: int
    page_size: int
    total_items: int
    total_pages: int


class SearchResponse(BaseModel):
    """検索APIのレスポンス封筒"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    data: list[GameItem] | None = None
    pagination: PaginationMetadata | None = None
    error: str | None = None

    @classmethod
    def failure(cls, message: str) -> "SearchResponse":
        return cls(success=False, error=message)

    def to_dict(self) -> dict:
        """camelCaseのdictに変換（未設定のフィールドは省略）"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
