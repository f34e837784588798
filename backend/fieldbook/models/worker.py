# backend/fieldbook/models/worker.py
from sqlalchemy import Integer, String, Column, Date
from sqlalchemy.orm import relationship
from .base import Base


class Worker(Base):
    __tablename__ = "workers"
    # 採番は max(id)+1（services.identity.credentials）
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False)
    father_name = Column(String, nullable=True)
    username = Column(String, nullable=False, unique=True)
    national_id = Column(String, nullable=False, unique=True)
    joining_date = Column(Date, nullable=False)
    departure_date = Column(Date, nullable=True)  # set = former worker
    education = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)

    assignments = relationship(
        "Assignment",
        back_populates="worker",
        cascade="all, delete-orphan",
    )
    trainings = relationship(
        "WorkerTraining",
        back_populates="worker",
        cascade="all, delete-orphan",
    )

    @property
    def is_active(self) -> bool:
        return self.departure_date is None
