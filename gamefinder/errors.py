"""ゲーム検索の例外定義"""


class GameSearchError(Exception):
    """検索処理の基底例外"""


class QueryConstructionError(GameSearchError):
    """プレースホルダとパラメータ数の不一致など、組み立て時の不整合"""


class StoreExecutionError(GameSearchError):
    """件数クエリまたはデータクエリの実行失敗"""


class MappingError(GameSearchError):
    """DB行をGameItemに変換できなかった"""
