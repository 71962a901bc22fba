from gamefinder.models.search import PaginationMetadata


def calculate_pagination(total: int, page: int, page_size: int) -> PaginationMetadata:
    """総件数・ページ番号・ページサイズからページ情報を計算

    page_size が 0 の場合はページングなし（全件1ページ）とみなす。
    """
    page = page if page > 0 else 1
    page_size = page_size if page_size > 0 else 0
    total = max(total, 0)

    if page_size == 0:
        total_pages = 1
    else:
        total_pages = max(1, -(-total // page_size))  # 切り上げ

    return PaginationMetadata(
        page=page,
        page_size=page_size,
        total_items=total,
        total_pages=total_pages,
    )
