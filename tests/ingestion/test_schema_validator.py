"""Tests for central table and workspace schema validation."""

import pytest

from roster_ingestion.adapters.memory_adapter import MemoryWorkbookSource
from roster_ingestion.schema_validator import (
    validate_central_tables,
    validate_table_headers,
    validate_workspace,
)
from roster_kernel.exceptions import MissingColumnsError, MissingTableError
from tests.conftest import central_source


class TestValidateCentralTables:

    def test_all_tables_present(self, engine_config, captured_logs):
        tables = validate_central_tables(central_source(engine_config), engine_config)

        assert set(tables) == {"workspaces", "rules", "decision", "leaves", "holidays"}
        assert len(tables["decision"]) == 8
        validated = [r for r in captured_logs() if r["message"] == "schema_validated"]
        assert validated[0]["source"] == "central"

    def test_optional_mapping_included_when_present(self, engine_config):
        source = central_source(engine_config, mapping=[("HAL1", "work")])
        tables = validate_central_tables(source, engine_config)
        assert "mapping" in tables

    def test_missing_required_tables_reported_together(self, engine_config, captured_logs):
        source = MemoryWorkbookSource({"Holidays": [["Date"]]}, name="broken")

        with pytest.raises(MissingTableError) as exc_info:
            validate_central_tables(source, engine_config)

        assert exc_info.value.table_names == [
            "Scheduler_Config",
            "Schedule_Rules",
            "Decision_Matrix",
            "Leave_Data",
        ]
        failed = [r for r in captured_logs() if r["message"] == "schema_validation_failed"]
        assert failed[0]["level"] == "ERROR"

    def test_missing_headers(self, engine_config):
        source = central_source(engine_config)
        grids = {name: source.read_grid(name) for name in source.sheet_names()}
        grids["Leave_Data"] = [["Employee_ID", "Leave_Date"]]

        with pytest.raises(MissingColumnsError) as exc_info:
            validate_central_tables(MemoryWorkbookSource(grids), engine_config)

        assert exc_info.value.table_name == "Leave_Data"
        assert exc_info.value.missing == ["Leave_Type"]

    def test_header_case_and_spacing_tolerated(self, engine_config):
        table = MemoryWorkbookSource({"Holidays": [[" date "]]}).read_table("Holidays")
        validate_table_headers(table, engine_config.table("holidays"))


class TestValidateWorkspace:

    def test_roster_tab_present(self, engine_config):
        validate_workspace(MemoryWorkbookSource({"Consolidated": []}), engine_config.roster)

    def test_roster_tab_missing(self, engine_config):
        with pytest.raises(MissingTableError) as exc_info:
            validate_workspace(MemoryWorkbookSource({"Sheet1": []}), engine_config.roster)
        assert exc_info.value.table_names == ["Consolidated"]
