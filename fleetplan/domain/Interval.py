"""Interval domain entity: maintenance checkpoint (hours + kilometers thresholds)."""
from decimal import Decimal
from typing import Optional


class Interval:
    def __init__(self, id: str, hours: Decimal, kilometers: Decimal, sequence_order: int,
                 column: Optional[int] = None):
        if hours < 0 or kilometers < 0:
            raise ValueError(f"Interval thresholds cannot be negative: {hours}h / {kilometers}km")
        self.id = id
        self.hours = Decimal(hours)
        self.kilometers = Decimal(kilometers)
        self.sequence_order = sequence_order
        self.column = column  # source column at import time

    @property
    def label(self) -> str:
        return f"I{self.sequence_order}"

    def __str__(self) -> str:
        return f"{self.label} - {self.hours}h / {self.kilometers}km"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        return Interval(
            id=data["id"],
            hours=Decimal(str(data.get("hours", "0"))),
            kilometers=Decimal(str(data.get("kilometers", "0"))),
            sequence_order=int(data.get("sequence_order", 0)),
            column=data.get("column"),
        )

    def to_dict(self):
        # Decimals are stored as strings so no precision is lost in JSON
        return {
            "id": self.id,
            "hours": str(self.hours),
            "kilometers": str(self.kilometers),
            "sequence_order": self.sequence_order,
            "column": self.column,
        }
