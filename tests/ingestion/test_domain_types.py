"""Tests for TableSnapshot and grid-to-table conversion."""

from roster_ingestion.domain.types import TableSnapshot, normalize_header, table_from_grid


class TestNormalizeHeader:

    def test_collapses_whitespace_and_case(self):
        assert normalize_header("  Rule   ID ") == "rule id"

    def test_none(self):
        assert normalize_header(None) == ""


class TestTableFromGrid:

    def test_basic(self):
        table = table_from_grid("T", [["a", "b"], [1, 2], [3, 4]])
        assert table.headers == ("a", "b")
        assert table.records == ({"a": 1, "b": 2}, {"a": 3, "b": 4})
        assert len(table) == 2

    def test_blank_and_duplicate_headers(self):
        table = table_from_grid("T", [["a", "", "a", "a"], [1, 2, 3, 4]])
        assert table.headers == ("a", "Column_2", "a_1", "a_2")

    def test_trailing_blank_headers_dropped(self):
        table = table_from_grid("T", [["a", "b", "", None], [1, 2, 9, 9]])
        assert table.headers == ("a", "b")
        assert table.records == ({"a": 1, "b": 2},)

    def test_short_rows_padded_and_blank_rows_skipped(self):
        table = table_from_grid("T", [["a", "b"], [1], ["", "  "], [None, None]])
        assert table.records == ({"a": 1, "b": None},)

    def test_header_row_offset(self):
        table = table_from_grid("T", [["title"], ["a"], [1]], header_row=2)
        assert table.headers == ("a",)

    def test_empty_grid(self):
        table = table_from_grid("T", [])
        assert table.headers == ()
        assert len(table) == 0


class TestTableSnapshot:

    def make_table(self):
        return TableSnapshot(
            name="Leave_Data",
            headers=("Employee_ID", "Leave Date", "Leave_Type"),
            records=({"Employee_ID": "E1", "Leave Date": "2025-01-06", "Leave_Type": "ANNUAL"},),
        )

    def test_header_lookup_is_case_insensitive(self):
        table = self.make_table()
        assert table.has_header("employee_id")
        assert table.has_header("LEAVE   DATE")
        assert not table.has_header("Reason")

    def test_missing_headers_keep_requested_spelling(self):
        assert self.make_table().missing_headers(["Leave_Type", "Approved_By"]) == ["Approved_By"]

    def test_project_by_logical_key(self):
        rows = self.make_table().project(
            {"employee_id": "employee_id", "leave_date": "Leave Date", "approver": "Approved_By"}
        )
        assert rows == [{"employee_id": "E1", "leave_date": "2025-01-06", "approver": None}]
