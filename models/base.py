from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class CaptureStatus(str, enum.Enum):
    """Capture completeness as reported by the field forms"""
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


class CaptureSource(str, enum.Enum):
    """Source tables feeding the capture export"""
    FIELD_RECORDS = "field_records"
    ROLL_INSTALLATION = "roll_installation"
    MATERIAL_RECORDS = "material_records"
