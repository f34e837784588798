# backend/fieldbook/models/community.py
from sqlalchemy import Column, String, Float
from sqlalchemy.orm import relationship
from .base import Base


class Community(Base):
    __tablename__ = "communities"
    name = Column(String, primary_key=True)
    alias = Column(String, nullable=True)
    country = Column(String, nullable=True)
    province = Column(String, nullable=True)
    district = Column(String, nullable=True)
    area = Column(Float, nullable=True)  # sq km
    forest_area = Column(Float, nullable=True)
    pasture_land = Column(Float, nullable=True)
    protection_status = Column(String, nullable=True)
    gps_lat = Column(Float, nullable=True)
    gps_long = Column(Float, nullable=True)

    villages = relationship("Village", back_populates="community")
