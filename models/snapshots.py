from sqlalchemy import Column, BigInteger, String, Integer, Float, Date, DateTime, UniqueConstraint
from models.base import Base


class ZoneDailySnapshot(Base):
    """
    Cumulative-to-date metrics for one zone on one calendar day.
    
    Design:
    - One row per (project_id, snapshot_date, zone_key)
    - Rebuilt from the capture tables; the unique constraint is the
      ON CONFLICT target of the snapshot upsert
    - Deployments created before the constraint existed are handled by the
      delete + insert fallback in the snapshot store
    """
    __tablename__ = "zone_daily_snapshots"
    
    id = Column(BigInteger, primary_key=True, autoincrement=True)
    project_id = Column(String(100), nullable=False, index=True)
    snapshot_date = Column(Date, nullable=False)
    zone_key = Column(String(255), nullable=False)
    macro_zone = Column(String(100), nullable=True)
    micro_zone = Column(String(100), nullable=True)
    
    cumulative_ft = Column(Float, nullable=False, default=0)
    cumulative_botes = Column(Float, nullable=False, default=0)
    cumulative_rolls = Column(Integer, nullable=False, default=0)
    cumulative_seams = Column(Integer, nullable=False, default=0)
    captures_count = Column(Integer, nullable=False, default=0)
    last_capture_at = Column(DateTime(timezone=True), nullable=True)
    
    __table_args__ = (
        UniqueConstraint(
            "project_id", "snapshot_date", "zone_key",
            name="uq_zone_daily_snapshots_project_date_zone"
        ),
    )
