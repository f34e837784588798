# backend/fieldbook/models/village.py
from sqlalchemy import Integer, String, Float, Column, ForeignKey
from sqlalchemy.orm import relationship
from .base import Base


class Village(Base):
    __tablename__ = "villages"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    community_name = Column(String, ForeignKey("communities.name"), nullable=False)
    population = Column(Integer, nullable=True)
    area = Column(Float, nullable=True)
    gps_lat = Column(Float, nullable=True)  # EPSG:4326
    gps_long = Column(Float, nullable=True)

    community = relationship("Community", back_populates="villages")
    beneficiaries = relationship("Beneficiary", back_populates="village")
    assignments = relationship(
        "Assignment", back_populates="village", cascade="all, delete-orphan"
    )
