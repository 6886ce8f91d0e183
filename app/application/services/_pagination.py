"""Page/page_size to offset arithmetic shared by list operations."""


def page_offset(page: int, page_size: int) -> int:
    """Offset of the first row on a 1-based page."""
    return (max(page, 1) - 1) * page_size
