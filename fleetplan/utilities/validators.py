"""
Input validation schemas using Pydantic for the maintenance plan endpoints.
"""
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional


class MatrixEditInput(BaseModel):
    """Single matrix cell edit from the interactive editor."""
    activity_id: str = Field(..., min_length=1)
    interval_id: str = Field(..., min_length=1)
    applies: bool

    @field_validator('activity_id', 'interval_id')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        return v.strip()


class ImportInput(BaseModel):
    """Form fields sent along with the uploaded workbook."""
    vehicle_type: str = Field(..., min_length=1, max_length=100)
    name: Optional[str] = Field(None, max_length=200)
    description: str = Field("", max_length=500)

    @field_validator('vehicle_type', 'description')
    @classmethod
    def strip_text(cls, v):
        return v.strip()

    @field_validator('name')
    @classmethod
    def default_blank_name(cls, v):
        """Blank names fall back to the default plan name."""
        if v is None or not v.strip():
            return None
        return v.strip()

    def plan_name(self) -> str:
        return self.name or f"Plan {self.vehicle_type}"


class DuplicatePlanInput(BaseModel):
    name: Optional[str] = Field(None, max_length=200)


class NextMaintenanceQuery(BaseModel):
    """Vehicle meters used to compute the next due maintenance."""
    odometer: float = Field(..., ge=0)
    hourmeter: float = Field(..., ge=0)
    last_odometer: float = Field(0, ge=0)
    last_hourmeter: float = Field(0, ge=0)

    @field_validator('last_odometer')
    @classmethod
    def last_odometer_not_ahead(cls, v, info):
        odometer = info.data.get('odometer')
        if odometer is not None and v > odometer:
            raise ValueError('last_odometer cannot be greater than odometer')
        return v

    @field_validator('last_hourmeter')
    @classmethod
    def last_hourmeter_not_ahead(cls, v, info):
        hourmeter = info.data.get('hourmeter')
        if hourmeter is not None and v > hourmeter:
            raise ValueError('last_hourmeter cannot be greater than hourmeter')
        return v


class PlanIntervalInput(BaseModel):
    hours: Decimal = Field(..., ge=0)
    kilometers: Decimal = Field(..., ge=0)


class PlanActivityInput(BaseModel):
    code: str = Field(..., pattern=r'^\s*[A-Za-z]+\.\d+\s*$')
    description: str = Field(..., max_length=300)
    category: str = Field("", pattern=r'^\s*[A-Za-z]*\s*$')

    @field_validator('description')
    @classmethod
    def description_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Activity description cannot be empty')
        return v.strip()


class PlanMatrixEntryInput(BaseModel):
    """One applicability mark: activity code x interval position (1-based)."""
    activity_code: str = Field(..., min_length=1)
    interval: int = Field(..., ge=1)
    applies: bool = True


class PlanCreateInput(ImportInput):
    """Full plan definition for manual creation (structure validated like an import)."""
    intervals: List[PlanIntervalInput] = Field(default_factory=list)
    activities: List[PlanActivityInput] = Field(default_factory=list)
    matrix: List[PlanMatrixEntryInput] = Field(default_factory=list)
    category_labels: Dict[str, str] = Field(default_factory=dict)


class PlanUpdateInput(BaseModel):
    """Plan metadata; intervals, activities and the matrix cannot be changed here."""
    model_config = ConfigDict(extra='forbid')

    name: Optional[str] = Field(None, max_length=200)
    vehicle_type: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

    @field_validator('name', 'vehicle_type')
    @classmethod
    def not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('cannot be blank')
        return v.strip() if v is not None else v
