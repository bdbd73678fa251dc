"""Tests for bulk CSV import of monitoring records."""

import pytest

from bluecarbon.exceptions import ValidationError
from bluecarbon.models.entities.localstore import MonitoringRecord
from bluecarbon.models.operations.mrv_import import mrv_read_csv, mrv_rows_to_forms

from conftest import PROJECT_FORM, run

SURVEY_CSV = (
    "projectId,date,soilCarbon,ndviValue,canopyHeight,species,surveyor\n"
    "1,2024-04-01,42.5,0.71,6.2,Rhizophora,Asha\n"
    "7,2024-04-02,40.1,0.69,5.9,Avicennia,Asha\n"
    "1,2024-04-03,,0.65,,,Ravi\n"
)


class TestReadCsv:

    def test_headers_are_mapped_and_unknown_columns_dropped(self):
        df = mrv_read_csv(SURVEY_CSV.encode("utf-8"))
        assert list(df.columns) == ["project_id", "date", "soil_carbon", "ndvi_value", "canopy_height", "species"]

    def test_blank_cells_stay_blank(self):
        forms = mrv_rows_to_forms(mrv_read_csv(SURVEY_CSV.encode("utf-8")))
        assert forms[2]["soil_carbon"] == ""
        assert forms[2]["ndvi_value"] == "0.65"

    def test_snake_case_headers(self, tmp_path):
        path = tmp_path / "survey.csv"
        path.write_text("project_id,ndvi,tree_height\n1,0.5,3.1\n", encoding="utf-8")
        forms = mrv_rows_to_forms(mrv_read_csv(path))
        assert forms == [{"project_id": "1", "ndvi_value": "0.5", "tree_height": "3.1"}]

    def test_text_is_content_not_a_path(self):
        forms = mrv_rows_to_forms(mrv_read_csv("project_id,dbh\n3,12.5\n"))
        assert forms == [{"project_id": "3", "dbh": "12.5"}]


class TestImport:

    def test_bad_rows_are_reported_and_skipped(self, field_registry, store):
        run(field_registry.submit_project(PROJECT_FORM))

        report = run(field_registry.import_monitoring_csv(SURVEY_CSV.encode("utf-8")))

        assert report.rows_processed == 3
        assert report.imported_ids == [1, 2]
        assert report.rows_failed == 1
        assert report.errors[0].row == 3
        assert report.errors[0].field == "project_id"

        records = MonitoringRecord.list(store)
        assert records[0].data.soil_carbon == 42.5
        assert records[1].data.soil_carbon is None
        assert records[1].data.ndvi == 0.65

    def test_empty_file_is_rejected(self, field_registry):
        with pytest.raises(ValidationError) as exc_info:
            run(field_registry.import_monitoring_csv(b""))
        assert exc_info.value.field == "file"

    def test_missing_file_is_rejected(self, field_registry, tmp_path):
        with pytest.raises(ValidationError) as exc_info:
            run(field_registry.import_monitoring_csv(tmp_path / "missing.csv"))
        assert exc_info.value.field == "file"

    def test_text_is_read_as_csv_content(self, field_registry, store):
        run(field_registry.submit_project(PROJECT_FORM))

        report = run(field_registry.import_monitoring_csv("projectId,ndvi\n1,0.42\n"))

        assert report.imported_ids == [1]
        assert MonitoringRecord.list(store)[0].data.ndvi == 0.42
