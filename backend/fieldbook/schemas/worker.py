# backend/fieldbook/schemas/worker.py
from pydantic import BaseModel, Field
from typing import Optional
import datetime as dt

from .commons import OptionalText, Text
from .geography import AssignmentOut
from .training import TrainingCompletionIn, WorkerTrainingOut


class WorkerCreate(BaseModel):
    name: Text = Field(min_length=1)
    father_name: OptionalText = None
    national_id: Text = Field(min_length=1)
    joining_date: dt.date
    education: OptionalText = None
    phone: OptionalText = None
    address: OptionalText = None
    trainings: list[TrainingCompletionIn] = []


class WorkerOut(BaseModel):
    id: int
    name: str
    father_name: Optional[str] = None
    username: str
    national_id: str
    joining_date: dt.date
    departure_date: Optional[dt.date] = None
    education: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool


class WorkerDetailOut(WorkerOut):
    villages: list[AssignmentOut] = []
    trainings: list[WorkerTrainingOut] = []


class IssuedCredentialsOut(BaseModel):
    # パスワードはこの応答でのみ返す（再表示しない）
    worker: WorkerOut
    email: str
    password: str
