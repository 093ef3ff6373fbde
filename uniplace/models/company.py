"""
Company model - recruiter directory with point-of-contact details.
"""

from sqlalchemy import Column, Integer, String, Text
from uniplace.database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    industry = Column(String(255))
    location = Column(String(255))
    website = Column(String(512))
    description = Column(Text)

    # ============ POINT OF CONTACT ============
    poc_name = Column(String(255))
    poc_email = Column(String(255))
    poc_phone = Column(String(50))

    total_offers = Column(Integer, default=0)

    def __repr__(self):
        return f"<Company(id={self.id}, name={self.name})>"
