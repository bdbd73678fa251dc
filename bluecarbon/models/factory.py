"""Domain record factory.

Turns collaborator form payloads into canonical records: required fields
are checked in a fixed order so the first missing or invalid field is the
one reported, numeric text is parsed, derived fields (identifier,
timestamps, initial status, zeroed totals) are filled in. Nothing is
written to the store here.
"""

import math
from datetime import date, datetime, timezone
from typing import Any, Callable, List, Optional, Type, TypeVar, get_args

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from bluecarbon import conf
from bluecarbon.clients.localstore import RecordStore
from bluecarbon.exceptions import ValidationError
from bluecarbon.models.entities.localstore import (
    Coordinates,
    CreditEntry,
    CreditEntryData,
    MediaReference,
    MonitoringRecord,
    MonitoringRecordData,
    Project,
    ProjectData,
    SPECIES_TAXONOMY,
)
from bluecarbon.models.entities.localstore.projects import EcosystemType
from bluecarbon.models.schemas import FormInput, MediaForm, MonitoringRecordForm, ProjectForm
from bluecarbon.utils import log

logger = log.get_logger(__name__)

FormT = TypeVar("FormT", bound=BaseModel)

ECOSYSTEMS = list(get_args(EcosystemType))

# Entity field -> form field, used when reporting pydantic errors.
_PROJECT_FORM_FIELDS = {
    "area_hectares": "area",
    "duration_years": "duration",
    "expected_annual_sequestration": "expected_carbon",
}
_MRV_FORM_FIELDS = {
    "observation_date": "date",
    "ndvi": "ndvi_value",
    "stem_diameter": "dbh",
    "media": "photos",
    "uri": "photos",
    "kind": "photos",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Text parsing ──────────────────────────────────────────────────────────────

def _blank(text: Optional[str]) -> bool:
    return text is None or not str(text).strip()


def parse_optional_float(field: str, text: Optional[str]) -> Optional[float]:
    """Parse numeric form text. Blank stays absent, it never becomes zero."""
    if _blank(text):
        return None
    try:
        value = float(str(text).strip())
    except ValueError:
        raise ValidationError(field, f"'{text}' is not a number")
    if not math.isfinite(value):
        raise ValidationError(field, f"'{text}' is not a finite number")
    return value


def parse_optional_int(field: str, text: Optional[str]) -> Optional[int]:
    value = parse_optional_float(field, text)
    if value is None:
        return None
    if not value.is_integer():
        raise ValidationError(field, f"'{text}' is not a whole number")
    return int(value)


def parse_coordinates(field: str, text: Optional[str]) -> Optional[Coordinates]:
    """Parse the ``"lat, lon"`` text captured by the location picker."""
    if _blank(text):
        return None
    parts = [p.strip() for p in str(text).split(",")]
    if len(parts) != 2:
        raise ValidationError(field, f"expected 'latitude, longitude', got '{text}'")
    latitude = parse_optional_float(field, parts[0])
    longitude = parse_optional_float(field, parts[1])
    if latitude is None or longitude is None:
        raise ValidationError(field, f"expected 'latitude, longitude', got '{text}'")
    try:
        return Coordinates(latitude=latitude, longitude=longitude)
    except PydanticValidationError as e:
        raise ValidationError(field, e.errors()[0]["msg"])


def _coerce_form(form_cls: Type[FormT], form: FormInput) -> FormT:
    if isinstance(form, form_cls):
        return form
    if isinstance(form, BaseModel):
        form = form.model_dump(by_alias=False)
    try:
        return form_cls.model_validate(form)
    except PydanticValidationError as e:
        raise _from_pydantic(e, {})


def _from_pydantic(error: PydanticValidationError, field_names: dict) -> ValidationError:
    fields: List[str] = []
    for err in error.errors():
        loc = err.get("loc") or ("__root__",)
        name = field_names.get(str(loc[0]), str(loc[0]))
        if name not in fields:
            fields.append(name)
    first = error.errors()[0]
    return ValidationError(fields[0], first["msg"], fields=fields)


# ── Factory ───────────────────────────────────────────────────────────────────

class RecordFactory:
    """Validates form payloads and builds records with store-assigned ids."""

    def __init__(
        self,
        store: RecordStore,
        methodologies: Optional[List[str]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.methodologies = methodologies if methodologies is not None else conf.get_methodologies()
        self.clock = clock

    def build_project(self, form: Any) -> Project:
        form = _coerce_form(ProjectForm, form)

        name = form.name.strip()
        if not name:
            raise ValidationError("name", "is required")
        if _blank(form.area):
            raise ValidationError("area", "is required")
        area = parse_optional_float("area", form.area)
        if area <= 0:
            raise ValidationError("area", "must be greater than zero")
        proponent = form.proponent.strip()
        if not proponent:
            raise ValidationError("proponent", "is required")

        ecosystem = form.ecosystem.strip().lower() or "mangrove"
        if ecosystem not in ECOSYSTEMS:
            raise ValidationError("ecosystem", f"must be one of {', '.join(ECOSYSTEMS)}")
        methodology = form.methodology.strip() or self.methodologies[0]
        if methodology not in self.methodologies:
            raise ValidationError("methodology", f"unknown methodology '{methodology}'")
        coordinates = parse_coordinates("coordinates", form.coordinates)
        duration = parse_optional_int("duration", form.duration)
        expected = parse_optional_float("expected_carbon", form.expected_carbon)

        try:
            data = ProjectData(
                name=name,
                ecosystem=ecosystem,
                coordinates=coordinates,
                area_hectares=area,
                proponent=proponent,
                methodology=methodology,
                duration_years=duration,
                expected_annual_sequestration=expected,
                description=form.description.strip(),
                status="pending",
                carbon_sequestered=0.0,
                credits_issued=0.0,
                registered_at=self.clock(),
            )
        except PydanticValidationError as e:
            raise _from_pydantic(e, _PROJECT_FORM_FIELDS)

        return Project(
            id=self.store.next_id(Project.collection_name()),
            data=data,
            synced=False,
        )

    def build_monitoring_record(self, form: Any) -> MonitoringRecord:
        form = _coerce_form(MonitoringRecordForm, form)

        if _blank(form.project_id):
            raise ValidationError("project_id", "is required")
        project_id = parse_optional_int("project_id", form.project_id)
        if Project.get(self.store, project_id) is None:
            raise ValidationError("project_id", f"project {project_id} does not exist")

        if _blank(form.date):
            observation_date = self.clock().date()
        else:
            try:
                observation_date = date.fromisoformat(form.date.strip())
            except ValueError:
                raise ValidationError("date", f"'{form.date}' is not an ISO date (YYYY-MM-DD)")

        species = form.species.strip() or None
        if species is not None and species not in SPECIES_TAXONOMY:
            raise ValidationError("species", f"must be one of {', '.join(SPECIES_TAXONOMY)}")

        measurements = {
            "soil_carbon": parse_optional_float("soil_carbon", form.soil_carbon),
            "ndvi": parse_optional_float("ndvi_value", form.ndvi_value),
            "canopy_height": parse_optional_float("canopy_height", form.canopy_height),
            "stem_diameter": parse_optional_float("dbh", form.dbh),
            "tree_height": parse_optional_float("tree_height", form.tree_height),
            "survival_rate": parse_optional_float("survival_rate", form.survival_rate),
        }

        try:
            media = [self._media_reference(p) for p in form.photos]
            data = MonitoringRecordData(
                project_id=project_id,
                observation_date=observation_date,
                species=species,
                media=media,
                captured_at=self.clock(),
                **measurements,
            )
        except PydanticValidationError as e:
            raise _from_pydantic(e, _MRV_FORM_FIELDS)

        return MonitoringRecord(
            id=self.store.next_id(MonitoringRecord.collection_name()),
            data=data,
            synced=False,
        )

    def build_credit_entry(
        self,
        project_id: int,
        kind: str,
        quantity: float,
        unit_price: float = 0.0,
        counterparty: Optional[str] = None,
        note: Optional[str] = None,
    ) -> CreditEntry:
        try:
            data = CreditEntryData(
                project_id=project_id,
                quantity=quantity,
                unit_price=unit_price,
                kind=kind,
                counterparty=counterparty,
                note=note,
                recorded_at=self.clock(),
            )
        except PydanticValidationError as e:
            raise _from_pydantic(e, {})
        return CreditEntry(
            id=self.store.next_id(CreditEntry.collection_name()),
            data=data,
            synced=False,
        )

    @staticmethod
    def _media_reference(photo: Any) -> MediaReference:
        if isinstance(photo, str):
            return MediaReference(uri=photo)
        if isinstance(photo, MediaForm):
            return MediaReference(**photo.model_dump())
        return MediaReference.model_validate(photo)
