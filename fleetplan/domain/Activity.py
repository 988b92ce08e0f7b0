"""Activity domain entity: category-scoped maintenance task (code, description, category)."""
import re
from typing import Optional

CATEGORY_CODE_PATTERN = re.compile(r'^[A-Za-z]+$')
ACTIVITY_CODE_PATTERN = re.compile(r'^([A-Za-z]+)\.(\d+)$')


def code_prefix(code: str) -> str:
    """Leading alphabetic prefix of a code, upper-cased ('a.12' -> 'A')."""
    m = re.match(r'^([A-Za-z]+)', (code or '').strip())
    return m.group(1).upper() if m else ""


class Activity:
    def __init__(self, id: str, code: str, description: str, category: str, sequence_order: int,
                 row: Optional[int] = None):
        self.id = id
        self.code = code.strip().upper()
        self.description = description.strip()
        self.category = category
        self.sequence_order = sequence_order
        self.row = row  # source row at import time

    def __str__(self) -> str:
        return f"{self.code} - {self.description} [{self.category}]"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        return Activity(
            id=data["id"],
            code=data.get("code", ""),
            description=data.get("description", ""),
            category=data.get("category", ""),
            sequence_order=int(data.get("sequence_order", 0)),
            row=data.get("row"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "description": self.description,
            "category": self.category,
            "sequence_order": self.sequence_order,
            "row": self.row,
        }
