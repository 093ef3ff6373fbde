"""
PortalSettings model - single-row configuration edited from the admin console.

The row with id 1 is the only one ever read or written.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from uniplace.database import Base

SETTINGS_ROW_ID = 1


class PortalSettings(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    college_name = Column(String(255))
    admin_email = Column(String(255))
    placement_year = Column(String(20))

    notify_on_application = Column(Boolean, default=True)
    notify_on_result = Column(Boolean, default=True)
    auto_sync_sheets = Column(Boolean, default=True)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<PortalSettings(id={self.id}, college={self.college_name})>"
