# backend/fieldbook/models/training.py
from sqlalchemy import Integer, String, Column, ForeignKey, Date
from sqlalchemy.orm import relationship
from .base import Base


class Training(Base):
    __tablename__ = "trainings"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    duration_days = Column(Integer, nullable=False)
    scope = Column(String, nullable=True)
    conducted_by = Column(String, nullable=True)

    completions = relationship(
        "WorkerTraining", back_populates="training", cascade="all, delete-orphan"
    )


class WorkerTraining(Base):
    __tablename__ = "worker_trainings"
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="CASCADE"), primary_key=True)
    training_id = Column(Integer, ForeignKey("trainings.id", ondelete="CASCADE"), primary_key=True)
    completed_on = Column(Date, nullable=True)

    worker = relationship("Worker", back_populates="trainings")
    training = relationship("Training", back_populates="completions")
