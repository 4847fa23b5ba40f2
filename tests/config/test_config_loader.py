"""
Tests for roster_config: defaults, merging, validation and the config trace.
"""

import pytest
import yaml

from roster_config import get_active_config
from roster_config.loader import (
    DEFAULTS_PATH,
    compute_checksum,
    deep_merge,
    load_yaml_file,
    parse_engine_config,
)
from roster_kernel.exceptions import ConfigurationError


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaults:

    def test_packaged_defaults(self):
        config = get_active_config()

        assert config.dry_run is False
        assert config.database_url == "sqlite:///roster.db"
        assert config.default_shift == "09:00 - 18:00"
        assert config.half_day_shifts == frozenset({"HAL1", "HAL2"})
        assert config.max_runtime_seconds == 300.0
        assert config.max_workers == 4
        assert config.roster.tabs == ("Consolidated",)
        assert config.roster.header_row == 4
        assert config.roster.data_row == 5
        assert config.table("decision").name == "Decision_Matrix"
        assert config.table("rules").header("approval_state") == "Approval_Status"

    def test_mapping_and_ledger_tables_are_optional(self):
        config = get_active_config()
        required = {t.key for t in config.required_tables}
        assert required == {"workspaces", "rules", "decision", "leaves", "holidays"}
        assert config.table("ledger").name == "Entitlement_Ledger"
        assert config.table("ledger").header("final_status") == "Final_Entitlement_Status"

    def test_unknown_table_key(self):
        with pytest.raises(KeyError):
            get_active_config().table("payroll")

    def test_resolution_settings(self):
        settings = get_active_config().resolution_settings()
        assert settings.default_shift == "09:00 - 18:00"
        assert "HAL2" in settings.half_day_shifts


class TestMerging:

    def test_user_file_merged_over_defaults(self, tmp_path):
        path = write_yaml(
            tmp_path / "site.yaml",
            {"tables": {"leaves": {"name": "Leave_Requests"}}, "max_workers": 8},
        )
        config = get_active_config(path)

        leaves = config.table("leaves")
        assert leaves.name == "Leave_Requests"
        assert leaves.header("leave_type") == "Leave_Type"
        assert config.max_workers == 8

    def test_overrides_win_over_file(self, tmp_path):
        path = write_yaml(tmp_path / "site.yaml", {"dry_run": False, "max_workers": 8})
        config = get_active_config(path, overrides={"dry_run": True})
        assert config.dry_run is True
        assert config.max_workers == 8

    def test_lists_replaced_whole(self):
        config = get_active_config(overrides={"roster": {"tabs": ["Week 1", "Week 2"]}})
        assert config.roster.tabs == ("Week 1", "Week 2")

    def test_deep_merge_does_not_mutate(self):
        base = {"a": {"b": 1, "c": [1]}}
        merged = deep_merge(base, {"a": {"b": 2}})
        assert merged == {"a": {"b": 2, "c": [1]}}
        assert base == {"a": {"b": 1, "c": [1]}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")


class TestValidation:

    @pytest.mark.parametrize(
        "overrides, setting",
        [
            ({"max_workers": 0}, "max_workers"),
            ({"max_workers": True}, "max_workers"),
            ({"max_runtime_seconds": -1}, "max_runtime_seconds"),
            ({"database_url": " "}, "database_url"),
            ({"roster": {"tabs": []}}, "roster.tabs"),
            ({"roster": {"data_row": 4}}, "roster.data_row"),
            ({"roster": {"columns": {"employee_id": ""}}}, "roster.columns"),
            ({"tables": {"rules": {"headers": {"priority": None}}}}, "tables.rules.headers"),
            ({"tables": {"holidays": {"name": ""}}}, "tables.holidays.name"),
        ],
    )
    def test_invalid_values(self, overrides, setting):
        with pytest.raises(ConfigurationError) as exc_info:
            get_active_config(overrides=overrides)
        assert exc_info.value.setting == setting

    def test_missing_table_section(self):
        data = load_yaml_file(DEFAULTS_PATH)
        del data["tables"]["holidays"]
        with pytest.raises(ConfigurationError) as exc_info:
            parse_engine_config(data)
        assert exc_info.value.setting == "tables"

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_yaml_file(path)


class TestChecksumAndTrace:

    def test_checksum_deterministic(self):
        assert compute_checksum({"b": 1, "a": 2}) == compute_checksum({"a": 2, "b": 1})
        assert len(compute_checksum({})) == 64

    def test_checksum_tracks_settings(self):
        assert get_active_config().checksum == get_active_config().checksum
        assert get_active_config().checksum != get_active_config(overrides={"dry_run": True}).checksum

    def test_config_trace_logged(self, captured_logs):
        config = get_active_config(overrides={"dry_run": True})
        traces = [r for r in captured_logs() if r["message"] == "ROSTER_CONFIG_TRACE"]
        assert traces[0]["checksum"] == config.checksum
        assert traces[0]["dry_run"] is True
        assert traces[0]["roster_tabs"] == ["Consolidated"]
