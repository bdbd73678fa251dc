from typing import List, Optional

from pydantic import BaseModel

from bluecarbon.clients.localstore import RecordStore
from bluecarbon.exceptions import PersistenceError, ValidationError
from bluecarbon.models.entities.localstore import CreditEntry, Project
from bluecarbon.models.factory import RecordFactory
from bluecarbon.utils import log

from .projects import project_require

logger = log.get_logger(__name__)


class CreditBalance(BaseModel):
    project_id: int
    issued: float
    retired: float
    traded: float
    available: float


def credit_list(store: RecordStore, project_id: Optional[int] = None) -> List[CreditEntry]:
    entries = CreditEntry.list(store)
    if project_id is not None:
        entries = [e for e in entries if e.data.project_id == project_id]
    return entries


def credit_balance(store: RecordStore, project_id: int) -> CreditBalance:
    return _balance(project_require(store, project_id), CreditEntry.list(store))


def _balance(project: Project, entries: List[CreditEntry]) -> CreditBalance:
    project_id = project.id
    retired = 0.0
    traded = 0.0
    for entry in entries:
        if entry.data.project_id != project_id:
            continue
        if entry.data.kind == "retire":
            retired += entry.data.quantity
        elif entry.data.kind == "trade":
            traded += entry.data.quantity
    issued = project.data.credits_issued
    return CreditBalance(
        project_id=project_id,
        issued=issued,
        retired=retired,
        traded=traded,
        available=max(0.0, issued - retired - traded),
    )


async def credit_issue(
    store: RecordStore,
    factory: RecordFactory,
    project_id: int,
    quantity: float,
    unit_price: float = 0.0,
    note: Optional[str] = None,
) -> CreditEntry:
    """Issue credits against verified sequestration.

    The project's issued total is checked and raised under the project
    collection lock; if the ledger entry then fails to persist, the project
    is put back the way it was.
    """
    entry = factory.build_credit_entry(project_id, "issue", quantity, unit_price, note=note)

    def _raise_issued(project: Project) -> Project:
        if project.data.status != "active":
            raise ValidationError("project_id", f"project {project_id} is not active")
        if project.data.credits_issued + quantity > project.data.carbon_sequestered:
            raise ValidationError(
                "quantity",
                f"issuing {quantity} would exceed sequestered carbon "
                f"({project.data.carbon_sequestered} tCO2e, "
                f"{project.data.credits_issued} already issued)",
            )
        return project.with_data(credits_issued=project.data.credits_issued + quantity)

    project = await store.replace(Project.collection_name(), project_id, _raise_issued)
    try:
        entry = await CreditEntry.insert(store, entry)
    except PersistenceError:
        logger.error(f"Ledger write failed, reverting issued credits on project #{project_id}")
        await store.replace(
            Project.collection_name(), project_id,
            lambda p: p.with_data(credits_issued=p.data.credits_issued - quantity),
        )
        raise

    logger.info(
        f"Issued {quantity} credits on project #{project_id} (total {project.data.credits_issued})"
    )
    return entry


async def _credit_spend(
    store: RecordStore,
    factory: RecordFactory,
    kind: str,
    project_id: int,
    quantity: float,
    unit_price: float,
    counterparty: Optional[str],
    note: Optional[str],
) -> CreditEntry:
    entry = factory.build_credit_entry(project_id, kind, quantity, unit_price, counterparty, note)
    project_require(store, project_id)

    def _check_available(entries: List[CreditEntry]) -> None:
        # The project is read without its own collection lock.
        balance = _balance(project_require(store, project_id), entries)
        if quantity > balance.available:
            raise ValidationError(
                "quantity",
                f"requested {quantity} exceeds available credits ({balance.available})",
            )

    entry = await CreditEntry.insert(store, entry, guard=_check_available)
    logger.info(f"Recorded {kind} of {quantity} credits on project #{project_id}")
    return entry


async def credit_retire(
    store: RecordStore,
    factory: RecordFactory,
    project_id: int,
    quantity: float,
    note: Optional[str] = None,
) -> CreditEntry:
    return await _credit_spend(store, factory, "retire", project_id, quantity, 0.0, None, note)


async def credit_trade(
    store: RecordStore,
    factory: RecordFactory,
    project_id: int,
    quantity: float,
    unit_price: float,
    counterparty: Optional[str] = None,
    note: Optional[str] = None,
) -> CreditEntry:
    return await _credit_spend(
        store, factory, "trade", project_id, quantity, unit_price, counterparty, note,
    )
