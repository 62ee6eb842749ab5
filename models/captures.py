from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, Text, Index
from sqlalchemy.dialects.postgresql import JSONB, UUID
from datetime import datetime, timezone
import uuid
from models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FieldRecord(Base):
    """
    Generic capture submitted by the compaction, pegada, incidence and
    verification forms.
    
    Payload shapes:
    - Nested: {"metadata": {...}, "photosUrls": [...]}
    - Legacy: the payload itself holds the metadata keys
    
    Metric keys inside the metadata changed names over time
    (ftTotales / ft_totales / ft / feet, ...); the export normalizer
    resolves them.
    """
    __tablename__ = "field_records"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(String(100), nullable=False, index=True)
    module = Column(String(50), nullable=False)
    field_type = Column(String(50), nullable=True)
    project_zone_id = Column(String(100), nullable=True)
    capture_session_id = Column(String(100), nullable=True)
    capture_status = Column(String(20), nullable=True)
    macro_zone = Column(String(100), nullable=True)
    micro_zone = Column(String(100), nullable=True)
    payload = Column(JSONB, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    
    __table_args__ = (
        Index("idx_field_records_project_created", "project_id", "created_at"),
    )


class RollInstallation(Base):
    """Roll installation capture: one row per installed zone segment"""
    __tablename__ = "roll_installation"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(String(100), nullable=False, index=True)
    project_zone_id = Column(String(100), nullable=True)
    field_type = Column(String(50), nullable=True)
    macro_zone = Column(String(100), nullable=True)
    micro_zone = Column(String(100), nullable=True)
    zone_type = Column(String(50), nullable=True)
    zone = Column(String(100), nullable=True)
    roll_length_fit = Column(String(50), nullable=True)
    total_rolls_used = Column(Integer, nullable=True)
    total_seams = Column(Integer, nullable=True)
    compaction_surface_firm = Column(Boolean, nullable=True)
    compaction_moisture_ok = Column(Boolean, nullable=True)
    compaction_double = Column(Boolean, nullable=True)
    compaction_method = Column(String(50), nullable=True)
    capture_session_id = Column(String(100), nullable=True)
    capture_status = Column(String(20), nullable=True)
    photos = Column(JSONB, nullable=True)  # list of URLs or {"url": ...} objects
    observations = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    
    __table_args__ = (
        Index("idx_roll_installation_project_created", "project_id", "created_at"),
    )


class MaterialRecord(Base):
    """Material usage capture (bags expected vs. used per pass)"""
    __tablename__ = "material_records"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(String(100), nullable=False, index=True)
    project_zone_id = Column(String(100), nullable=True)
    field_type = Column(String(50), nullable=True)
    macro_zone = Column(String(100), nullable=True)
    micro_zone = Column(String(100), nullable=True)
    zone = Column(String(100), nullable=True)
    capture_session_id = Column(String(100), nullable=True)
    capture_status = Column(String(20), nullable=True)
    tipo_material = Column(String(50), nullable=True)
    tipo_pasada = Column(String(50), nullable=True)
    valvula = Column(Float, nullable=True)
    bolsas_esperadas = Column(Float, nullable=True)
    bolsas_utilizadas = Column(Float, nullable=True)
    desviacion = Column(Float, nullable=True)
    status_color = Column(String(20), nullable=True)
    sugerencia = Column(Text, nullable=True)
    fotos = Column(JSONB, nullable=True)
    observaciones = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    
    __table_args__ = (
        Index("idx_material_records_project_created", "project_id", "created_at"),
    )
