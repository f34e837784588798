# backend/fieldbook/schemas/visit.py
from pydantic import BaseModel, Field
from typing import Optional
import datetime as dt

from .commons import Amount, Count, OptionalText, RecordId, Text


class SpeciesCounts(BaseModel):
    sheep: Count = None
    goat: Count = None
    cattle: Count = None
    yak_dzo: Count = None
    other: Count = None


class VaccinationLineIn(SpeciesCounts):
    # 種別が空の行は保存しない（プレースホルダ扱い）
    vaccination_type: OptionalText = None


class DiseaseLineIn(SpeciesCounts):
    disease_type: OptionalText = None
    symptoms: list[Optional[str]] = []


class PredationLineIn(SpeciesCounts):
    predator_type: OptionalText = None
    cost_per_animal: Amount = None


class FieldVisitIn(BaseModel):
    season: Text = Field(min_length=1)
    visit_date: dt.date
    beneficiary_id: RecordId
    worker_id: Optional[RecordId] = None  # defaults to the logged-in worker
    donor: OptionalText = None

    big_animals_slaughtered: Count = None
    small_animals_slaughtered: Count = None
    sheep_sold: Count = None
    cattle_sold: Count = None
    goat_sold: Count = None
    price_per_animal_sold: Amount = None

    vaccinations: list[VaccinationLineIn] = []
    diseases: list[DiseaseLineIn] = []
    predations: list[PredationLineIn] = []


class FieldVisitCreated(BaseModel):
    visit_id: int
    vaccination_lines: int
    disease_lines: int
    symptoms: int
    predation_lines: int


class VaccinationLineOut(SpeciesCounts):
    id: int
    vaccination_type: str


class DiseaseLineOut(SpeciesCounts):
    id: int
    disease_type: str
    symptoms: list[str] = []


class PredationLineOut(SpeciesCounts):
    id: int
    predator_type: str
    cost_per_animal: Optional[float] = None


class FieldVisitOut(BaseModel):
    id: int
    year: int
    season: str
    visit_date: dt.date
    donor: Optional[str] = None
    beneficiary_id: int
    worker_id: int
    big_animals_slaughtered: Optional[int] = None
    small_animals_slaughtered: Optional[int] = None
    sheep_sold: Optional[int] = None
    cattle_sold: Optional[int] = None
    goat_sold: Optional[int] = None
    price_per_animal_sold: Optional[float] = None
    vaccinations: list[VaccinationLineOut] = []
    diseases: list[DiseaseLineOut] = []
    predations: list[PredationLineOut] = []
