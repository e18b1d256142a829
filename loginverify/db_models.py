from __future__ import annotations
from sqlalchemy import JSON, Column, DateTime, String, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class Verification(Base):
    __tablename__ = "verifications"
    id = Column(String(256), primary_key=True)
    status = Column(String(16))  # approved|denied; NULL or no row == pending
    decided_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    extra = Column(JSON)  # owned by whoever mints the id; never written here
