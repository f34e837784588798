# backend/fieldbook/schemas/training.py
from pydantic import BaseModel, Field
from typing import Optional
import datetime as dt

from .commons import OptionalText, RecordId, Text


class TrainingIn(BaseModel):
    name: Text = Field(min_length=1)
    year: int = Field(ge=1, le=9999)
    duration_days: int = Field(ge=1, le=36500)
    scope: OptionalText = None
    conducted_by: OptionalText = None


class TrainingOut(BaseModel):
    id: int
    name: str
    year: int
    duration_days: int
    scope: Optional[str] = None
    conducted_by: Optional[str] = None


class TrainingCompletionIn(BaseModel):
    training_id: RecordId
    completed_on: Optional[dt.date] = None


class WorkerTrainingOut(TrainingOut):
    completed_on: Optional[dt.date] = None
