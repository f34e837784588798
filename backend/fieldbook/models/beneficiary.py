# backend/fieldbook/models/beneficiary.py
from sqlalchemy import Integer, String, Column, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class Beneficiary(Base):
    __tablename__ = "beneficiaries"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    father_name = Column(String, nullable=True)
    village_id = Column(Integer, ForeignKey("villages.id"), nullable=False)

    village = relationship("Village", back_populates="beneficiaries")
    visits = relationship("FieldVisit", back_populates="beneficiary")
