"""Tests for turning form payloads into records."""

from datetime import date

import pytest

from bluecarbon.exceptions import ValidationError
from bluecarbon.models.entities.localstore import Project
from bluecarbon.models.factory import parse_coordinates, parse_optional_float
from bluecarbon.models.schemas import MonitoringRecordForm

from conftest import FIXED_NOW, PROJECT_FORM, run


class TestParsing:

    def test_blank_text_is_absent_not_zero(self):
        assert parse_optional_float("soil_carbon", "") is None
        assert parse_optional_float("soil_carbon", "   ") is None
        assert parse_optional_float("soil_carbon", "0") == 0.0

    @pytest.mark.parametrize("text", ["abc", "nan", "inf"])
    def test_invalid_numbers(self, text):
        with pytest.raises(ValidationError) as exc_info:
            parse_optional_float("area", text)
        assert exc_info.value.field == "area"

    def test_coordinates(self):
        coords = parse_coordinates("coordinates", "22.2587, 89.9101")
        assert coords.latitude == 22.2587
        assert coords.longitude == 89.9101
        assert parse_coordinates("coordinates", "") is None

    @pytest.mark.parametrize("text", ["22.2587", "91, 10", "10, 181", "a, b"])
    def test_bad_coordinates(self, text):
        with pytest.raises(ValidationError) as exc_info:
            parse_coordinates("coordinates", text)
        assert exc_info.value.field == "coordinates"


class TestBuildProject:

    def test_valid_project_defaults(self, factory):
        project = factory.build_project({
            **PROJECT_FORM,
            "ecosystem": "seagrass",
            "coordinates": "9.4981, 76.3388",
            "duration": "20",
            "expectedCarbon": "1420.5",
        })

        assert project.id == 1
        assert project.synced is False
        assert project.data.status == "pending"
        assert project.data.carbon_sequestered == 0
        assert project.data.credits_issued == 0
        assert project.data.area_hectares == 10.0
        assert project.data.duration_years == 20
        assert project.data.expected_annual_sequestration == 1420.5
        assert project.data.registered_at == FIXED_NOW

    def test_optional_fields_left_blank_are_absent(self, factory):
        project = factory.build_project({**PROJECT_FORM, "duration": "", "expectedCarbon": ""})
        assert project.data.duration_years is None
        assert project.data.expected_annual_sequestration is None
        assert project.data.coordinates is None

    def test_numbers_from_json_clients_are_accepted(self, factory):
        project = factory.build_project({"name": "Delta", "area": 12.5, "proponent": "Org"})
        assert project.data.area_hectares == 12.5

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"name": ""}, "name"),
            ({"name": "   "}, "name"),
            ({"area": ""}, "area"),
            ({"area": "0"}, "area"),
            ({"area": "-3"}, "area"),
            ({"area": "ten"}, "area"),
            ({"proponent": ""}, "proponent"),
            ({"ecosystem": "desert"}, "ecosystem"),
            ({"methodology": "XYZ-1"}, "methodology"),
            ({"duration": "2.5"}, "duration"),
            ({"duration": "0"}, "duration"),
            ({"expectedCarbon": "-1"}, "expected_carbon"),
        ],
    )
    def test_invalid_field_is_named(self, factory, store, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            factory.build_project({**PROJECT_FORM, **overrides})
        assert exc_info.value.field == field
        assert store.get_all("projects") == []

    def test_first_invalid_field_is_reported(self, factory):
        with pytest.raises(ValidationError) as exc_info:
            factory.build_project({"name": "", "area": "", "proponent": ""})
        assert exc_info.value.field == "name"

    def test_ids_follow_collection_size(self, factory, store):
        first = factory.build_project(PROJECT_FORM)
        run(Project.insert(store, first))
        second = factory.build_project(PROJECT_FORM)
        assert second.id == 2


class TestBuildMonitoringRecord:

    @pytest.fixture
    def project(self, factory, store):
        return run(Project.insert(store, factory.build_project(PROJECT_FORM)))

    def test_blank_measurement_stays_absent(self, factory, project):
        record = factory.build_monitoring_record({
            "projectId": str(project.id),
            "soilCarbon": "",
            "ndviValue": "0.65",
        })
        assert record.data.soil_carbon is None
        assert record.data.ndvi == 0.65
        assert record.data.canopy_height is None
        assert record.synced is False

    def test_zero_reading_is_kept(self, factory, project):
        record = factory.build_monitoring_record({"project_id": project.id, "soil_carbon": "0"})
        assert record.data.soil_carbon == 0.0

    def test_date_defaults_to_today(self, factory, project):
        record = factory.build_monitoring_record({"projectId": project.id})
        assert record.data.observation_date == FIXED_NOW.date()
        assert record.data.captured_at == FIXED_NOW

    def test_explicit_date_and_media(self, factory, project):
        form = MonitoringRecordForm(
            project_id=str(project.id),
            date="2024-02-29",
            species="Avicennia",
            photos=["file:///a.jpg", {"uri": "file:///plot.pdf", "kind": "document", "filename": "plot.pdf"}],
        )
        record = factory.build_monitoring_record(form)

        assert record.data.observation_date == date(2024, 2, 29)
        assert record.data.species == "Avicennia"
        assert [m.uri for m in record.data.media] == ["file:///a.jpg", "file:///plot.pdf"]
        assert record.data.media[0].kind == "photo"
        assert record.data.media[1].kind == "document"

    @pytest.mark.parametrize("project_id", ["", "99", "abc"])
    def test_project_must_exist(self, factory, store, project, project_id):
        with pytest.raises(ValidationError) as exc_info:
            factory.build_monitoring_record({"projectId": project_id, "ndviValue": "0.5"})
        assert exc_info.value.field == "project_id"
        assert store.get_all("mrvData") == []

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"ndviValue": "1.5"}, "ndvi_value"),
            ({"survivalRate": "101"}, "survival_rate"),
            ({"dbh": "-2"}, "dbh"),
            ({"species": "Quercus"}, "species"),
            ({"date": "17/05/2024"}, "date"),
        ],
    )
    def test_invalid_measurements(self, factory, project, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            factory.build_monitoring_record({"projectId": project.id, **overrides})
        assert exc_info.value.field == field
