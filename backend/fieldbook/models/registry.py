# backend/fieldbook/models/registry.py
# 全モデルを import してメタデータ・リレーションを登録する
from .base import Base
from .community import Community
from .village import Village
from .worker import Worker
from .assignment import Assignment
from .training import Training, WorkerTraining
from .beneficiary import Beneficiary
from .field_visit import FieldVisit
from .vaccination_line import VaccinationLine
from .disease_line import DiseaseLine, DiseaseSymptom
from .predation_line import PredationLine

__all__ = [
    "Base",
    "Community",
    "Village",
    "Worker",
    "Assignment",
    "Training",
    "WorkerTraining",
    "Beneficiary",
    "FieldVisit",
    "VaccinationLine",
    "DiseaseLine",
    "DiseaseSymptom",
    "PredationLine",
]
