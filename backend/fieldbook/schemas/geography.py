# backend/fieldbook/schemas/geography.py
from pydantic import BaseModel, Field
from typing import Optional
import datetime as dt

from .commons import Amount, Count, OptionalText, RecordId, Text


class CommunityIn(BaseModel):
    name: Text = Field(min_length=1)
    alias: OptionalText = None
    country: OptionalText = None
    province: OptionalText = None
    district: OptionalText = None
    area: Amount = None
    forest_area: Amount = None
    pasture_land: Amount = None
    protection_status: OptionalText = None
    gps_lat: Amount = None
    gps_long: Amount = None


class CommunityOut(BaseModel):
    name: str
    alias: Optional[str] = None
    country: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    area: Optional[float] = None
    forest_area: Optional[float] = None
    pasture_land: Optional[float] = None
    protection_status: Optional[str] = None
    gps_lat: Optional[float] = None
    gps_long: Optional[float] = None


class VillageIn(BaseModel):
    name: Text = Field(min_length=1)
    community_name: Text = Field(min_length=1)
    population: Count = None
    area: Amount = None
    gps_lat: Amount = None
    gps_long: Amount = None


class VillageOut(BaseModel):
    id: int
    name: str
    community_name: str
    population: Optional[int] = None
    area: Optional[float] = None
    gps_lat: Optional[float] = None
    gps_long: Optional[float] = None


class AssignmentOut(BaseModel):
    worker_id: int
    village_id: int
    village_name: Optional[str] = None
    community_name: Optional[str] = None
    worker_name: Optional[str] = None
    started_on: dt.date
    ended_on: Optional[dt.date] = None
    is_active: bool


class VillageDetailOut(VillageOut):
    assignments: list[AssignmentOut] = []


class AssignVillageIn(BaseModel):
    village_id: RecordId
    started_on: Optional[dt.date] = None


class EndAssignmentIn(BaseModel):
    ended_on: Optional[dt.date] = None


class BeneficiaryIn(BaseModel):
    name: Text = Field(min_length=1)
    father_name: OptionalText = None
    village_id: RecordId


class BeneficiaryOut(BaseModel):
    id: int
    name: str
    father_name: Optional[str] = None
    village_id: int
