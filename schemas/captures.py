"""
Pydantic schemas for the canonical capture row and the zone daily snapshot row
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, Tuple
from models.base import CaptureStatus


CAPTURE_EXPORT_COLUMNS: Tuple[str, ...] = (
    "project_id",
    "created_at",
    "capture_date",
    "module",
    "capture_status",
    "capture_session_id",
    "project_zone_id",
    "field_type",
    "macro_zone",
    "micro_zone",
    "zone",
    "ft_totales",
    "botes_usados",
    "total_rolls_used",
    "total_seams",
    "roll_length_fit",
    "compaction_method",
    "compaction_surface_firm",
    "compaction_moisture_ok",
    "compaction_double",
    "tipo_material",
    "tipo_pasada",
    "valvula",
    "bolsas_esperadas",
    "bolsas_utilizadas",
    "desviacion_material",
    "status_color_material",
    "photos_count",
    "observaciones",
)

ZONE_SNAPSHOT_COLUMNS: Tuple[str, ...] = (
    "project_id",
    "snapshot_date",
    "zone_key",
    "macro_zone",
    "micro_zone",
    "cumulative_ft",
    "cumulative_botes",
    "cumulative_rolls",
    "cumulative_seams",
    "captures_count",
    "last_capture_at",
)


class CaptureExportRow(BaseModel):
    """
    Canonical flat representation of one capture, whatever table it came from.
    
    Metrics that do not apply to the capture's module stay None so that
    aggregations never mistake "not reported" for zero.
    """
    
    # Identity
    project_id: str
    created_at: str
    capture_date: Optional[str] = None
    module: str
    capture_status: CaptureStatus = CaptureStatus.COMPLETE
    capture_session_id: Optional[str] = None
    
    # Location
    project_zone_id: Optional[str] = None
    field_type: Optional[str] = None
    macro_zone: Optional[str] = None
    micro_zone: Optional[str] = None
    zone: Optional[str] = None
    
    # Installation metrics
    ft_totales: Optional[float] = None
    botes_usados: Optional[float] = None
    total_rolls_used: Optional[float] = None
    total_seams: Optional[float] = None
    roll_length_fit: Optional[str] = None
    
    # Compaction
    compaction_method: Optional[str] = None
    compaction_surface_firm: Optional[bool] = None
    compaction_moisture_ok: Optional[bool] = None
    compaction_double: Optional[bool] = None
    
    # Material
    tipo_material: Optional[str] = None
    tipo_pasada: Optional[str] = None
    valvula: Optional[float] = None
    bolsas_esperadas: Optional[float] = None
    bolsas_utilizadas: Optional[float] = None
    desviacion_material: Optional[float] = None
    status_color_material: Optional[str] = None
    
    photos_count: Optional[int] = Field(None, ge=0)
    observaciones: Optional[str] = None
    
    @validator("capture_date", always=True)
    def derive_capture_date(cls, v, values):
        """Default capture_date to the date part of created_at"""
        if v:
            return v
        created_at = values.get("created_at")
        return created_at[:10] if created_at else None
    
    class Config:
        use_enum_values = True


class ZoneDailySnapshotRow(BaseModel):
    """Cumulative metrics for one zone on one calendar day"""
    
    project_id: str
    snapshot_date: str
    zone_key: str
    macro_zone: Optional[str] = None
    micro_zone: Optional[str] = None
    cumulative_ft: float = 0
    cumulative_botes: float = 0
    cumulative_rolls: int = 0
    cumulative_seams: int = 0
    captures_count: int = 0
    last_capture_at: Optional[str] = None
