from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bluecarbon.clients.localstore import BaseLocalModel, BaseLocalEntityData

EcosystemType = Literal["mangrove", "seagrass", "saltmarsh", "wetland"]
ProjectStatus = Literal["pending", "active", "completed", "rejected"]


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    def __str__(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"


class ProjectData(BaseLocalEntityData):
    name: str = Field(min_length=1)
    ecosystem: EcosystemType = "mangrove"
    coordinates: Optional[Coordinates] = None
    area_hectares: float = Field(gt=0)
    proponent: str = Field(min_length=1)
    methodology: str = "VM0033"
    duration_years: Optional[int] = Field(default=None, gt=0)
    expected_annual_sequestration: Optional[float] = Field(default=None, ge=0)
    description: str = ""
    status: ProjectStatus = "pending"
    carbon_sequestered: float = Field(default=0.0, ge=0)
    credits_issued: float = Field(default=0.0, ge=0)
    registered_at: datetime

    @model_validator(mode="after")
    def _credits_within_sequestration(self) -> "ProjectData":
        if self.credits_issued > self.carbon_sequestered:
            raise ValueError(
                f"credits_issued ({self.credits_issued}) exceeds "
                f"carbon_sequestered ({self.carbon_sequestered})"
            )
        return self


class Project(BaseLocalModel[ProjectData]):
    _collection_name = "projects"
