# assetdex/models/inventory_models.py
"""
Rack inventory models matching the Alembic migrations.
All tables use the 'dcim' schema with lowercase column names.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from assetdex.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# -------------------------------------------------------
# RACK
# Migration: 001_create_dcim_rack
# -------------------------------------------------------
class Rack(Base):
    __tablename__ = "dcim_rack"
    __table_args__ = {"schema": "dcim"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    total_units = Column(Integer, nullable=True)  # NULL -> settings.RACK_TOTAL_UNITS
    datacenter = Column(String(255), nullable=True)
    floor = Column(Integer, nullable=True)
    location = Column(String(255), nullable=True)
    description = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    servers = relationship("Server", back_populates="rack")


# -------------------------------------------------------
# SERVER
# Migration: 002_create_dcim_server
# -------------------------------------------------------
class Server(Base):
    __tablename__ = "dcim_server"
    __table_args__ = {"schema": "dcim"}

    id = Column(String(36), primary_key=True, default=_new_id)
    hostname = Column(String(255), nullable=False, index=True)
    serial_number = Column(String(255), nullable=True, index=True)
    brand = Column(String(255), nullable=True)
    model = Column(String(255), nullable=True)
    status = Column(String(255), nullable=False, default="active")
    device_type = Column(String(255), nullable=True)
    rack_id = Column(
        Integer,
        ForeignKey("dcim.dcim_rack.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    unit = Column(String(8), nullable=True)  # Lowest occupied unit, stored as "U<n>"
    unit_height = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    rack = relationship("Rack", back_populates="servers")
    position_history = relationship(
        "ServerPositionHistory",
        back_populates="server",
        cascade="all, delete-orphan",
    )


# -------------------------------------------------------
# SERVER POSITION HISTORY
# Migration: 003_create_dcim_server_position_history
# -------------------------------------------------------
class ServerPositionHistory(Base):
    __tablename__ = "dcim_server_position_history"
    __table_args__ = {"schema": "dcim"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    server_id = Column(
        String(36),
        ForeignKey("dcim.dcim_server.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    previous_rack = Column(String(255), nullable=True)
    previous_unit = Column(String(8), nullable=True)
    previous_unit_height = Column(Integer, nullable=True)
    new_rack = Column(String(255), nullable=False)
    new_unit = Column(String(8), nullable=False)
    new_unit_height = Column(Integer, nullable=False)
    changed_by = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    changed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    server = relationship("Server", back_populates="position_history")
