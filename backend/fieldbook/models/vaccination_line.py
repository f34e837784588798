# backend/fieldbook/models/vaccination_line.py
from sqlalchemy import Integer, String, Column, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class VaccinationLine(Base):
    __tablename__ = "vaccination_lines"
    id = Column(Integer, primary_key=True)
    visit_id = Column(Integer, ForeignKey("field_visits.id", ondelete="CASCADE"), nullable=False)
    vaccination_type = Column(String, nullable=False)  # FMD, PPR, Anthrax ...
    sheep = Column(Integer, nullable=True)
    goat = Column(Integer, nullable=True)
    cattle = Column(Integer, nullable=True)
    yak_dzo = Column(Integer, nullable=True)
    other = Column(Integer, nullable=True)

    visit = relationship("FieldVisit", back_populates="vaccinations")
