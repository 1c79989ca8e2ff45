"""Customer feedback model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.exceptions import ResponseSchemaError
from . import fields

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class Feedback:
    """A star rating with a comment. Admins may delete it."""

    id: str
    author: str
    comment: str
    rating: int
    created_at: Optional[datetime] = None

    @property
    def stars(self) -> str:
        return "★" * self.rating + "☆" * (MAX_RATING - self.rating)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Feedback":
        data = fields.require_mapping(data, "Feedback")
        rating = fields.integer(data, "rating", "Feedback", default=None)
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ResponseSchemaError("Feedback", f"rating {rating} outside 1-5")

        return cls(
            id=fields.identifier(data, "Feedback"),
            author=fields.text(data, "name", "Feedback", default=None),
            comment=fields.text(data, "comment", "Feedback"),
            rating=rating,
            created_at=fields.timestamp(data, "createdAt", "Feedback"),
        )

    @classmethod
    def list_from(cls, payload: Any) -> List["Feedback"]:
        return [cls.from_dict(f) for f in fields.require_list(payload, "Feedback list")]
