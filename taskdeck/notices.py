from __future__ import annotations

import datetime
import uuid
from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, Field

NoticeLevel = Literal["info", "warning", "error"]


class Notice(BaseModel):
    """Transient, human-readable status message for the presentation layer.

    Notices are fire-and-forget: they carry no return value and a failing
    sink never affects the store operation that emitted them.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    message: str
    level: NoticeLevel = "info"
    undo_available: bool = False
    created_at: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC)
    )


NoticeSink = Callable[[Notice], None]


def discard_notice(notice: Notice) -> None:
    return None


__all__ = ["Notice", "NoticeLevel", "NoticeSink", "discard_notice"]
