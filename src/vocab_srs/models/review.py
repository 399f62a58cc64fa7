from pydantic import BaseModel, ConfigDict, Field


class Flashcard(BaseModel):
    """A flashcard as handed over by the learning session.

    学習セッション完了時に受け取るカード。id 以外は ReviewItem.content に
    そのまま格納され、スケジューラは中身を解釈しない。
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    front: str
    back: str
    example: str | None = None


class ReviewEvent(BaseModel):
    """Review event emitted by the review session.

    - item_id: 採点対象
    - quality: 0..5（UI は 1/3/4/5 のみ送る）
    """

    item_id: str = Field(min_length=1)
    quality: int = Field(strict=True, ge=0, le=5)


class ReviewStats(BaseModel):
    """進捗の見える化 用の統計。

    - total: 追跡中の項目数
    - due_now: 現在時点で出題すべき件数
    - scheduled_today: 今日が出題予定日の件数
    - reviewed_today: 今日レビュー済み件数
    """

    total: int
    due_now: int
    scheduled_today: int
    reviewed_today: int
