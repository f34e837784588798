# backend/fieldbook/models/disease_line.py
from sqlalchemy import Integer, String, Column, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class DiseaseLine(Base):
    __tablename__ = "disease_lines"
    id = Column(Integer, primary_key=True)
    visit_id = Column(Integer, ForeignKey("field_visits.id", ondelete="CASCADE"), nullable=False)
    disease_type = Column(String, nullable=False)
    sheep = Column(Integer, nullable=True)
    goat = Column(Integer, nullable=True)
    cattle = Column(Integer, nullable=True)
    yak_dzo = Column(Integer, nullable=True)
    other = Column(Integer, nullable=True)

    visit = relationship("FieldVisit", back_populates="diseases")
    symptoms = relationship(
        "DiseaseSymptom", back_populates="disease", cascade="all, delete-orphan"
    )


class DiseaseSymptom(Base):
    __tablename__ = "disease_symptoms"
    id = Column(Integer, primary_key=True)
    disease_id = Column(Integer, ForeignKey("disease_lines.id", ondelete="CASCADE"), nullable=False)
    symptom = Column(String, nullable=False)

    disease = relationship("DiseaseLine", back_populates="symptoms")
