"""
Bulk MRV import.

Parses a field-survey CSV (one monitoring observation per row) into
monitoring form payloads. Cells are read as text and blanks stay blank, so
a missing reading reaches the record factory exactly as an empty form field
would.
"""

import io
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Union

import pandas as pd
from pydantic import BaseModel

from bluecarbon.exceptions import ValidationError
from bluecarbon.models.entities.localstore import MonitoringRecord
from bluecarbon.utils import log

logger = log.get_logger(__name__)

# CSV header (normalised) -> monitoring form field
COLUMN_MAP: Dict[str, str] = {
    "project_id": "project_id",
    "projectid": "project_id",
    "project": "project_id",
    "date": "date",
    "observation_date": "date",
    "soil_carbon": "soil_carbon",
    "soilcarbon": "soil_carbon",
    "ndvi": "ndvi_value",
    "ndvi_value": "ndvi_value",
    "ndvivalue": "ndvi_value",
    "canopy_height": "canopy_height",
    "canopyheight": "canopy_height",
    "dbh": "dbh",
    "stem_diameter": "dbh",
    "tree_height": "tree_height",
    "treeheight": "tree_height",
    "survival_rate": "survival_rate",
    "survivalrate": "survival_rate",
    "species": "species",
}

# Path: file on disk; str or bytes: the CSV content itself
CsvSource = Union[Path, str, bytes]


class ImportRowError(BaseModel):
    row: int
    field: str
    message: str


class ImportReport(BaseModel):
    rows_processed: int = 0
    imported_ids: List[int] = []
    errors: List[ImportRowError] = []

    @property
    def rows_imported(self) -> int:
        return len(self.imported_ids)

    @property
    def rows_failed(self) -> int:
        return len(self.errors)


def _normalize_header(raw: str) -> str:
    return str(raw).strip().lower().replace(" ", "_").replace("-", "_")


def mrv_read_csv(source: CsvSource) -> pd.DataFrame:
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    elif isinstance(source, str):
        source = io.StringIO(source)
    df = pd.read_csv(source, dtype=str, keep_default_na=False)
    unknown = []
    renames = {}
    for column in df.columns:
        key = _normalize_header(column)
        if key in COLUMN_MAP:
            renames[column] = COLUMN_MAP[key]
        else:
            unknown.append(column)
    if unknown:
        logger.warning(f"Ignoring unknown MRV columns: {unknown}")
    return df.rename(columns=renames)[list(renames.values())]


def mrv_rows_to_forms(df: pd.DataFrame) -> List[Dict[str, str]]:
    """Turn parsed rows into form payloads, trimming whitespace only."""
    forms = []
    for _, row in df.iterrows():
        forms.append({field: str(value).strip() for field, value in row.items()})
    return forms


async def mrv_import_csv(
    source: CsvSource,
    submit: Callable[[Dict[str, str]], Awaitable[MonitoringRecord]],
) -> ImportReport:
    """Submit each CSV row through ``submit``; rejected rows are reported, not fatal."""
    try:
        df = mrv_read_csv(source)
    except (ValueError, OSError) as e:
        raise ValidationError("file", f"could not read CSV: {e}")

    report = ImportReport()
    # Row 1 is the header line.
    for row_number, form in enumerate(mrv_rows_to_forms(df), start=2):
        report.rows_processed += 1
        try:
            record = await submit(form)
        except ValidationError as e:
            report.errors.append(ImportRowError(row=row_number, field=e.field, message=e.message))
            continue
        report.imported_ids.append(record.id)

    logger.info(
        f"CSV import: {report.rows_imported} imported, {report.rows_failed} rejected "
        f"of {report.rows_processed} rows"
    )
    return report
