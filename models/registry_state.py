"""
RegistryState model - single row holding process-wide registry settings.

Holds the administrator identity, the pause flag and the id counter so that
all three are restored together after a restart.
"""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from .base import Base


STATE_ROW_ID = 1


class RegistryState(Base):
     __tablename__ = "registry_state"

     id = Column(Integer, primary_key=True, autoincrement=False, default=STATE_ROW_ID)
     admin = Column(String(128), nullable=False)
     paused = Column(Boolean, default=False, nullable=False)
     next_id = Column(Integer, default=1, nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     def __repr__(self):
          return f"<RegistryState(admin='{self.admin}', paused={self.paused}, next_id={self.next_id})>"
