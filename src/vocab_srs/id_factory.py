"""ID 生成ユーティリティ。

ReviewItem の item_id は「フラッシュカード ID + フォルダ ID」の複合キー。
同じカードが別フォルダにあれば別の復習対象として扱う。
"""

from __future__ import annotations

from .errors import InvalidArgumentError


def _require(value: str, name: str) -> str:
    text = str(value).strip()
    if not text:
        raise InvalidArgumentError(f"{name} must not be empty")
    return text


def make_review_item_id(flashcard_id: str, folder_id: str) -> str:
    """Return the composite key ``fc:<folder_id>:<flashcard_id>``."""

    return f"fc:{_require(folder_id, 'folder_id')}:{_require(flashcard_id, 'flashcard_id')}"


def make_word_item_id(word_id: str) -> str:
    """Admin 管理の単語（type=word）用の ID。prefix は "w:"。"""

    return f"w:{_require(word_id, 'word_id')}"
