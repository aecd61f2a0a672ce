from sqlalchemy import JSON, BigInteger, Boolean, Column, Float, Integer, String, Text

from opscentral.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(64), primary_key=True, index=True)  # Job No. (e.g. AE-1042, WH-12)
    title = Column(String(255), nullable=True)
    shipper_name = Column(String(255), nullable=True)
    shipper_phone = Column(String(40), nullable=True)
    client_email = Column(String(255), nullable=True)
    location = Column(Text, nullable=True)
    shipment_details = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    priority = Column(String(10), nullable=True)
    agent_name = Column(String(255), nullable=True)
    loading_type = Column(String(40), nullable=True)
    main_category = Column(String(40), nullable=True)
    sub_category = Column(String(40), nullable=True)
    shuttle = Column(String(3), nullable=True)
    long_carry = Column(String(3), nullable=True)
    special_requests = Column(JSON, nullable=True)
    volume_cbm = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    job_date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    job_time = Column(String(10), nullable=True)
    duration = Column(Integer, nullable=True, default=1)

    status = Column(String(20), nullable=False, index=True)
    created_at = Column(BigInteger, nullable=True)  # epoch millis
    requester_id = Column(String(40), nullable=True, index=True)
    assigned_to = Column(String(255), nullable=True)

    is_warehouse_activity = Column(Boolean, nullable=True, default=False)
    is_import_clearance = Column(Boolean, nullable=True, default=False)
    is_transporter = Column(Boolean, nullable=True, default=False)
    is_locked = Column(Boolean, nullable=True, default=False)

    team_leader = Column(String(255), nullable=True)
    writer_crew = Column(JSON, nullable=True)
    vehicle = Column(Text, nullable=True)  # legacy comma-joined form of vehicles
    vehicles = Column(JSON, nullable=True)

    bol_number = Column(String(64), nullable=True)
    container_number = Column(String(64), nullable=True)
    customs_status = Column(String(30), nullable=True)
    customs_history = Column(JSON, nullable=True)

    tracking_current_step = Column(Integer, nullable=True)
    tracking_data = Column(JSON, nullable=True)

    activity_name = Column(String(255), nullable=True)

    drop_off_locations = Column(JSON, nullable=True)
    transporter_status = Column(String(20), nullable=True)
