# backend/fieldbook/models/field_visit.py
from sqlalchemy import Integer, String, Column, ForeignKey, Date, Float
from sqlalchemy.orm import relationship
from .base import Base


class FieldVisit(Base):
    __tablename__ = "field_visits"
    id = Column(Integer, primary_key=True)
    year = Column(Integer, nullable=False)  # visit_date から導出
    season = Column(String, nullable=False)
    visit_date = Column(Date, nullable=False)
    donor = Column(String, nullable=True)
    beneficiary_id = Column(Integer, ForeignKey("beneficiaries.id"), nullable=False)
    # 作業者削除後も履歴として残すため FK は張らない
    worker_id = Column(Integer, nullable=False, index=True)

    big_animals_slaughtered = Column(Integer, nullable=True)
    small_animals_slaughtered = Column(Integer, nullable=True)
    sheep_sold = Column(Integer, nullable=True)
    cattle_sold = Column(Integer, nullable=True)
    goat_sold = Column(Integer, nullable=True)
    price_per_animal_sold = Column(Float, nullable=True)

    beneficiary = relationship("Beneficiary", back_populates="visits")
    worker = relationship(
        "Worker",
        primaryjoin="foreign(FieldVisit.worker_id) == Worker.id",
        viewonly=True,
    )
    vaccinations = relationship(
        "VaccinationLine", back_populates="visit", cascade="all, delete-orphan"
    )
    diseases = relationship(
        "DiseaseLine", back_populates="visit", cascade="all, delete-orphan"
    )
    predations = relationship(
        "PredationLine", back_populates="visit", cascade="all, delete-orphan"
    )
