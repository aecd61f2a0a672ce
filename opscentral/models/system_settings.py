from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from opscentral.database import Base


class SystemSettingsRow(Base):
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True)
    daily_job_limits = Column(JSON, nullable=True)
    holidays = Column(JSON, nullable=True)
    company_logo = Column(Text, nullable=True)  # base64 image
    system_alert = Column(JSON, nullable=True)


class ViewerState(Base):
    __tablename__ = "viewer_state"

    key = Column(String(120), primary_key=True)  # "<namespace>:<employee_id>"
    payload = Column(Text, nullable=False)  # JSON-encoded
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
