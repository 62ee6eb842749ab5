"""
Transform raw capture rows into the canonical CaptureExportRow schema
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any, Optional, List, Mapping, Sequence
from schemas.captures import CaptureExportRow
from models.base import CaptureSource, CaptureStatus
from reporting.transformers.date_range import to_date_key
import enum
import json
import logging
import math

logger = logging.getLogger(__name__)


# Candidate metadata keys per canonical field, first match wins.
# Capture payloads were renamed several times; every spelling still exists in storage.
FIELD_RECORD_ALIASES: Dict[str, List[str]] = {
    "macro_zone": ["macro_zone", "macroZone"],
    "micro_zone": ["micro_zone", "microZone"],
    "zone": ["zone"],
    "capture_session_id": ["capture_session_id", "captureSessionId"],
    "project_zone_id": ["project_zone_id", "projectZoneId"],
    "field_type": ["fieldType", "field_type"],
    "ft_totales": ["ftTotales", "ft_totales", "ft", "feet"],
    "botes_usados": ["botesUsados", "botes_usados", "botes"],
    "total_rolls_used": ["totalRollsUsed", "total_rolls_used", "totalRolls"],
    "total_seams": ["totalSeams", "total_seams", "seams"],
    "roll_length_fit": ["roll_length_fit", "rollLengthFit", "rollLengthStatus"],
    "compaction_method": ["compaction_method", "compactionMethod", "compactacionType"],
    "compaction_surface_firm": ["compaction_surface_firm", "surfaceFirm"],
    "compaction_moisture_ok": ["compaction_moisture_ok", "moistureOk"],
    "compaction_double": ["compaction_double", "doubleCompaction"],
    "tipo_material": ["tipoMaterial", "tipo_material"],
    "tipo_pasada": ["tipoPasada", "tipo_pasada"],
    "valvula": ["valvula", "valve"],
    "bolsas_esperadas": ["bolsasEsperadas", "bolsas_esperadas"],
    "bolsas_utilizadas": ["bolsasUtilizadas", "bolsas_utilizadas"],
    "desviacion_material": ["desviacion", "deviation"],
    "status_color_material": ["status_color", "statusColor"],
    "observaciones": ["observaciones", "observations", "notes"],
}

DEFAULT_FIELD_RECORD_MODULE = "field_record"


# ============================================================================
# Value coercion
# ============================================================================

def to_string_safe(value: Any) -> Optional[str]:
    """Trimmed non-empty string, else None"""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def to_number(value: Any) -> Optional[float]:
    """Finite number from a numeric value or numeric string; booleans are not numbers"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def to_boolean(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lower = value.strip().lower()
        if lower == "true":
            return True
        if lower == "false":
            return False
    return None


def to_timestamp_string(value: Any) -> Optional[str]:
    """ISO-8601 text for a timestamp column; datetimes are rendered in UTC"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    return to_string_safe(value)


def as_mapping(value: Any) -> Dict[str, Any]:
    """Mapping from a dict or a JSON-encoded object string, else {}"""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    return dict(value) if isinstance(value, Mapping) else {}


def as_list(value: Any) -> List[Any]:
    """List from a list/tuple or a JSON-encoded array string, else []"""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return []
    return list(value) if isinstance(value, (list, tuple)) else []


def count_strings(values: Sequence[Any]) -> int:
    return sum(1 for item in values if isinstance(item, str) and item)


def count_photo_entries(value: Any) -> int:
    """Count photos given as URL strings or as objects carrying a url"""
    count = 0
    for item in as_list(value):
        if isinstance(item, str) and item:
            count += 1
        elif isinstance(item, Mapping) and isinstance(item.get("url"), str) and item["url"]:
            count += 1
    return count


def pick_string(source: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = to_string_safe(source.get(key))
        if value:
            return value
    return None


def pick_number(source: Mapping[str, Any], keys: Sequence[str]) -> Optional[float]:
    for key in keys:
        value = to_number(source.get(key))
        if value is not None:
            return value
    return None


def pick_boolean(source: Mapping[str, Any], keys: Sequence[str]) -> Optional[bool]:
    for key in keys:
        value = to_boolean(source.get(key))
        if value is not None:
            return value
    return None


def normalize_capture_status(value: Any) -> CaptureStatus:
    return CaptureStatus.INCOMPLETE if value == CaptureStatus.INCOMPLETE.value else CaptureStatus.COMPLETE


# ============================================================================
# Payload shape
# ============================================================================

class PayloadShape(str, enum.Enum):
    """How a field_records payload stores its metadata"""
    LEGACY = "legacy"  # metadata keys live directly in the payload
    NESTED = "nested"  # metadata keys live under payload["metadata"]


@dataclass(frozen=True)
class CapturePayload:
    """A field_records payload with its metadata located once"""
    shape: PayloadShape
    payload: Dict[str, Any]
    metadata: Dict[str, Any]

    @classmethod
    def resolve(cls, raw_payload: Any) -> "CapturePayload":
        payload = as_mapping(raw_payload)
        nested = payload.get("metadata")
        if isinstance(nested, Mapping):
            return cls(PayloadShape.NESTED, payload, dict(nested))
        return cls(PayloadShape.LEGACY, payload, payload)

    @property
    def photos_count(self) -> int:
        """
        Photos reported either as a URL array or as an evidence map.

        The two conventions describe the same photos, so the larger count wins.
        """
        url_count = count_strings(as_list(self.payload.get("photosUrls")))
        evidence_count = count_strings(list(as_mapping(self.metadata.get("evidencePhotos")).values()))
        return max(url_count, evidence_count)


# ============================================================================
# Normalizer
# ============================================================================

class CaptureNormalizer:
    """
    Normalize rows from the capture tables into CaptureExportRow.

    Handles:
    - Per-table field mapping
    - Legacy and nested field_records payloads
    - Historical key aliases
    - Type coercion (strings, numbers, booleans, JSON text)
    """

    def __init__(self, project_id: str):
        self.project_id = project_id

    def normalize(self, source: CaptureSource, raw_row: Mapping[str, Any]) -> CaptureExportRow:
        """
        Normalize a raw row from ``source`` into the canonical schema.

        Returns:
            Validated CaptureExportRow
        """
        if source == CaptureSource.FIELD_RECORDS:
            return self._normalize_field_record(raw_row)
        elif source == CaptureSource.ROLL_INSTALLATION:
            return self._normalize_roll_installation(raw_row)
        elif source == CaptureSource.MATERIAL_RECORDS:
            return self._normalize_material_record(raw_row)
        else:
            raise ValueError(f"Unknown capture source: {source}")

    def normalize_many(self, source: CaptureSource, raw_rows: Sequence[Mapping[str, Any]]) -> List[CaptureExportRow]:
        return [self.normalize(source, raw_row) for raw_row in raw_rows]

    def _normalize_field_record(self, record: Mapping[str, Any]) -> CaptureExportRow:
        """Normalize field_records (compaction, pegada, incidences, verification)"""
        captured = CapturePayload.resolve(record.get("payload"))
        metadata = captured.metadata

        def column_or_metadata(column: str) -> Optional[str]:
            return to_string_safe(record.get(column)) or pick_string(metadata, FIELD_RECORD_ALIASES[column])

        def metric(field: str) -> Optional[float]:
            return pick_number(metadata, FIELD_RECORD_ALIASES[field])

        def text(field: str) -> Optional[str]:
            return pick_string(metadata, FIELD_RECORD_ALIASES[field])

        def flag(field: str) -> Optional[bool]:
            return pick_boolean(metadata, FIELD_RECORD_ALIASES[field])

        created_at = self._created_at(record)
        macro_zone = column_or_metadata("macro_zone")
        micro_zone = column_or_metadata("micro_zone")

        raw_status = next(
            (
                value
                for value in (record.get("capture_status"), metadata.get("capture_status"), metadata.get("captureStatus"))
                if value is not None
            ),
            None,
        )

        return CaptureExportRow(
            project_id=self.project_id,
            created_at=created_at,
            capture_date=self._capture_date(created_at),
            module=to_string_safe(record.get("module")) or DEFAULT_FIELD_RECORD_MODULE,
            capture_status=normalize_capture_status(raw_status),
            capture_session_id=column_or_metadata("capture_session_id"),
            project_zone_id=column_or_metadata("project_zone_id"),
            field_type=column_or_metadata("field_type"),
            macro_zone=macro_zone,
            micro_zone=micro_zone,
            zone=text("zone") or micro_zone or macro_zone,
            ft_totales=metric("ft_totales"),
            botes_usados=metric("botes_usados"),
            total_rolls_used=metric("total_rolls_used"),
            total_seams=metric("total_seams"),
            roll_length_fit=text("roll_length_fit"),
            compaction_method=text("compaction_method"),
            compaction_surface_firm=flag("compaction_surface_firm"),
            compaction_moisture_ok=flag("compaction_moisture_ok"),
            compaction_double=flag("compaction_double"),
            tipo_material=text("tipo_material"),
            tipo_pasada=text("tipo_pasada"),
            valvula=metric("valvula"),
            bolsas_esperadas=metric("bolsas_esperadas"),
            bolsas_utilizadas=metric("bolsas_utilizadas"),
            desviacion_material=metric("desviacion_material"),
            status_color_material=text("status_color_material"),
            photos_count=captured.photos_count,
            observaciones=text("observaciones"),
        )

    def _normalize_roll_installation(self, record: Mapping[str, Any]) -> CaptureExportRow:
        """Normalize roll_installation rows (flat columns)"""
        created_at = self._created_at(record)
        macro_zone = to_string_safe(record.get("macro_zone"))
        micro_zone = to_string_safe(record.get("micro_zone"))

        return CaptureExportRow(
            project_id=self.project_id,
            created_at=created_at,
            capture_date=self._capture_date(created_at),
            module=CaptureSource.ROLL_INSTALLATION.value,
            capture_status=normalize_capture_status(record.get("capture_status")),
            capture_session_id=to_string_safe(record.get("capture_session_id")),
            project_zone_id=to_string_safe(record.get("project_zone_id")),
            field_type=to_string_safe(record.get("field_type")),
            macro_zone=macro_zone,
            micro_zone=micro_zone,
            zone=to_string_safe(record.get("zone")) or micro_zone or macro_zone,
            total_rolls_used=to_number(record.get("total_rolls_used")),
            total_seams=to_number(record.get("total_seams")),
            roll_length_fit=to_string_safe(record.get("roll_length_fit")),
            compaction_method=to_string_safe(record.get("compaction_method")),
            compaction_surface_firm=to_boolean(record.get("compaction_surface_firm")),
            compaction_moisture_ok=to_boolean(record.get("compaction_moisture_ok")),
            compaction_double=to_boolean(record.get("compaction_double")),
            photos_count=count_photo_entries(record.get("photos")),
            observaciones=to_string_safe(record.get("observations")),
        )

    def _normalize_material_record(self, record: Mapping[str, Any]) -> CaptureExportRow:
        """Normalize material_records rows"""
        created_at = self._created_at(record)

        return CaptureExportRow(
            project_id=self.project_id,
            created_at=created_at,
            capture_date=self._capture_date(created_at),
            module="material",
            capture_status=normalize_capture_status(record.get("capture_status")),
            capture_session_id=to_string_safe(record.get("capture_session_id")),
            project_zone_id=to_string_safe(record.get("project_zone_id")),
            field_type=to_string_safe(record.get("field_type")),
            macro_zone=to_string_safe(record.get("macro_zone")),
            micro_zone=to_string_safe(record.get("micro_zone")),
            zone=to_string_safe(record.get("zone")),
            tipo_material=to_string_safe(record.get("tipo_material")),
            tipo_pasada=to_string_safe(record.get("tipo_pasada")),
            valvula=to_number(record.get("valvula")),
            bolsas_esperadas=to_number(record.get("bolsas_esperadas")),
            bolsas_utilizadas=to_number(record.get("bolsas_utilizadas")),
            desviacion_material=to_number(record.get("desviacion")),
            status_color_material=to_string_safe(record.get("status_color")),
            photos_count=count_strings(as_list(record.get("fotos"))),
            observaciones=to_string_safe(record.get("observaciones")),
        )

    @staticmethod
    def _created_at(record: Mapping[str, Any]) -> str:
        created_at = to_timestamp_string(record.get("created_at"))
        if created_at is None:
            logger.warning(f"Capture row without created_at (id={record.get('id')}), using current time")
            created_at = datetime.now(timezone.utc).isoformat()
        return created_at

    @staticmethod
    def _capture_date(created_at: str) -> str:
        return to_date_key(created_at) or created_at[:10]
