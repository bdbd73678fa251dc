from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from bluecarbon.clients.localstore import BaseLocalModel, BaseLocalEntityData

SPECIES_TAXONOMY = ["Rhizophora", "Avicennia", "Bruguiera", "Ceriops"]

Species = Literal["Rhizophora", "Avicennia", "Bruguiera", "Ceriops"]


class MediaReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str = Field(min_length=1)
    kind: Literal["photo", "document"] = "photo"
    filename: Optional[str] = None


class MonitoringRecordData(BaseLocalEntityData):
    project_id: int
    observation_date: date
    # Measurements are absent (None) when left blank in the field survey.
    soil_carbon: Optional[float] = Field(default=None, ge=0)
    ndvi: Optional[float] = Field(default=None, ge=-1, le=1)
    canopy_height: Optional[float] = Field(default=None, ge=0)
    stem_diameter: Optional[float] = Field(default=None, ge=0)
    tree_height: Optional[float] = Field(default=None, ge=0)
    survival_rate: Optional[float] = Field(default=None, ge=0, le=100)
    species: Optional[Species] = None
    media: List[MediaReference] = []
    captured_at: datetime


class MonitoringRecord(BaseLocalModel[MonitoringRecordData]):
    _collection_name = "mrvData"
