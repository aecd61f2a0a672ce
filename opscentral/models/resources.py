from sqlalchemy import Column, String

from opscentral.database import Base


class Personnel(Base):
    __tablename__ = "personnel"

    id = Column(String(64), primary_key=True, index=True)
    employee_id = Column(String(40), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="Available")
    emirates_id = Column(String(40), nullable=False)
    license_number = Column(String(40), nullable=True)


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    plate = Column(String(40), nullable=False)
    status = Column(String(20), nullable=False, default="Available")
