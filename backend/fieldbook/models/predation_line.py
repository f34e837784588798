# backend/fieldbook/models/predation_line.py
from sqlalchemy import Integer, String, Column, ForeignKey, Float
from sqlalchemy.orm import relationship
from .base import Base


class PredationLine(Base):
    __tablename__ = "predation_lines"
    id = Column(Integer, primary_key=True)
    visit_id = Column(Integer, ForeignKey("field_visits.id", ondelete="CASCADE"), nullable=False)
    predator_type = Column(String, nullable=False)  # snow leopard, wolf ...
    sheep = Column(Integer, nullable=True)
    goat = Column(Integer, nullable=True)
    cattle = Column(Integer, nullable=True)
    yak_dzo = Column(Integer, nullable=True)
    other = Column(Integer, nullable=True)
    cost_per_animal = Column(Float, nullable=True)

    visit = relationship("FieldVisit", back_populates="predations")
