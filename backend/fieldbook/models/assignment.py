# backend/fieldbook/models/assignment.py
from sqlalchemy import Integer, Column, ForeignKey, Date, Index
from sqlalchemy.orm import relationship
from .base import Base


class Assignment(Base):
    __tablename__ = "worker_villages"
    id = Column(Integer, primary_key=True)
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False)
    village_id = Column(Integer, ForeignKey("villages.id", ondelete="CASCADE"), nullable=False)
    started_on = Column(Date, nullable=False)
    ended_on = Column(Date, nullable=True)  # NULL = open assignment

    worker = relationship("Worker", back_populates="assignments")
    village = relationship("Village", back_populates="assignments")

    __table_args__ = (
        # at most one open assignment per (worker, village)
        Index(
            "uq_worker_villages_open",
            "worker_id",
            "village_id",
            unique=True,
            sqlite_where=ended_on.is_(None),
            postgresql_where=ended_on.is_(None),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.ended_on is None
