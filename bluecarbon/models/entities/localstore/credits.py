from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from bluecarbon.clients.localstore import BaseLocalModel, BaseLocalEntityData

CreditOperation = Literal["issue", "retire", "trade"]


class CreditEntryData(BaseLocalEntityData):
    project_id: int
    quantity: float = Field(gt=0)
    unit_price: float = Field(default=0.0, ge=0)
    kind: CreditOperation
    counterparty: Optional[str] = None
    note: Optional[str] = None
    recorded_at: datetime


class CreditEntry(BaseLocalModel[CreditEntryData]):
    _collection_name = "credits"
