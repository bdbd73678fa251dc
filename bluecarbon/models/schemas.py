"""Payloads handed to the core by the presentation layer.

Form values arrive as text, exactly as typed into the field app. Numbers
sent by JSON clients are accepted and turned into text so that one parsing
path (the record factory) decides what blank, zero and invalid mean.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class _FormBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        return value


class ProjectForm(_FormBase):
    name: str = ""
    ecosystem: str = "mangrove"
    coordinates: str = ""
    area: str = ""
    proponent: str = ""
    methodology: str = "VM0033"
    duration: str = ""
    expected_carbon: str = ""
    description: str = ""


class MediaForm(BaseModel):
    uri: str
    kind: str = "photo"
    filename: Optional[str] = None


class MonitoringRecordForm(_FormBase):
    project_id: str = ""
    date: str = ""
    soil_carbon: str = ""
    ndvi_value: str = ""
    canopy_height: str = ""
    dbh: str = ""
    tree_height: str = ""
    survival_rate: str = ""
    species: str = ""
    photos: List[Union[str, MediaForm]] = Field(default_factory=list)


class CreditOperationRequest(BaseModel):
    project_id: int
    quantity: float
    unit_price: float = 0.0
    counterparty: Optional[str] = None
    note: Optional[str] = None


class ProjectStatusRequest(BaseModel):
    status: str


class SequestrationRequest(BaseModel):
    tonnes: float


class ConnectivityReport(BaseModel):
    is_connected: bool


FormInput = Union[Dict[str, Any], BaseModel]
