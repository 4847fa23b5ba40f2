"""
Typed exception hierarchy for the roster kernel.

Every exception carries a machine-readable ``code`` class attribute and
keeps its context as attributes, so callers catch by type and log
structured data instead of parsing messages.

    RosterKernelError (base)
    |
    +-- ConfigurationError
    |
    +-- SchemaError
    |   +-- MissingTableError
    |   +-- MissingColumnsError
    |
    +-- RosterLayoutError
    |
    +-- ContextError
    |   +-- EmptyDecisionTableError
    |
    +-- WorkspaceError
    |   +-- WorkspaceNotFoundError
    |
    +-- LedgerError
        +-- LedgerWriteConflictError

Category    | Code                       | When Raised
------------|----------------------------|-------------------------------------------
Config      | CONFIGURATION_ERROR        | Config file/value cannot be used
Schema      | MISSING_TABLE              | Required input table absent (fatal)
            | MISSING_COLUMNS            | Required headers absent (schema drift)
Roster      | ROSTER_LAYOUT_ERROR        | Roster grid lacks columns or date headers
Context     | EMPTY_DECISION_TABLE       | No decision rows indexed; run cannot start
Workspace   | WORKSPACE_NOT_FOUND        | Workspace source cannot be opened
Ledger      | LEDGER_WRITE_CONFLICT      | Write set targets a ledger row that is gone

Per-cell resolution problems (no matching decision row, mirror-audit
mismatch, malformed rules) are NOT exceptions: they are reported as data
on the resolution result so one bad cell never aborts a batch.
"""


class RosterKernelError(Exception):
    """Base exception for all roster kernel errors."""

    code: str = "ROSTER_KERNEL_ERROR"


class ConfigurationError(RosterKernelError):
    """Configuration could not be loaded or holds an invalid value."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, setting: str, detail: str):
        self.setting = setting
        self.detail = detail
        super().__init__(f"Invalid configuration for '{setting}': {detail}")


# Structural (schema drift) failures


class SchemaError(RosterKernelError):
    """Base exception for structural input failures."""

    code: str = "SCHEMA_ERROR"


class MissingTableError(SchemaError):
    """A required input table is missing from the source."""

    code: str = "MISSING_TABLE"

    def __init__(self, table_names: list[str]):
        self.table_names = list(table_names)
        super().__init__(
            f"Missing required tables: {', '.join(self.table_names)}"
        )


class MissingColumnsError(SchemaError):
    """A table is present but lacks required headers."""

    code: str = "MISSING_COLUMNS"

    def __init__(self, table_name: str, missing: list[str]):
        self.table_name = table_name
        self.missing = list(missing)
        super().__init__(
            f'Schema validation failed for "{table_name}". '
            f"Missing headers: [{', '.join(self.missing)}]"
        )


class RosterLayoutError(RosterKernelError):
    """The roster grid does not have the expected layout."""

    code: str = "ROSTER_LAYOUT_ERROR"

    def __init__(self, tab_name: str, detail: str):
        self.tab_name = tab_name
        self.detail = detail
        super().__init__(f"Roster tab '{tab_name}': {detail}")


# Context construction


class ContextError(RosterKernelError):
    """Base exception for engine context preconditions."""

    code: str = "CONTEXT_ERROR"


class EmptyDecisionTableError(ContextError):
    """No decision rows were indexed, so no cell could ever resolve."""

    code: str = "EMPTY_DECISION_TABLE"

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(
            f"No decision logic loaded from '{table_name}'. Check its headers."
        )


# Workspaces


class WorkspaceError(RosterKernelError):
    """Base exception for workspace-level failures."""

    code: str = "WORKSPACE_ERROR"


class WorkspaceNotFoundError(WorkspaceError):
    """A workspace listed as active cannot be opened."""

    code: str = "WORKSPACE_NOT_FOUND"

    def __init__(self, workspace_id: str):
        self.workspace_id = workspace_id
        super().__init__(f"Workspace not found: {workspace_id}")


# Ledger


class LedgerError(RosterKernelError):
    """Base exception for entitlement ledger errors."""

    code: str = "LEDGER_ERROR"


class LedgerWriteConflictError(LedgerError):
    """A staged update targets a ledger row that no longer exists."""

    code: str = "LEDGER_WRITE_CONFLICT"

    def __init__(self, employee_key: str, entitlement_date: str):
        self.employee_key = employee_key
        self.entitlement_date = entitlement_date
        super().__init__(
            f"Ledger entry {employee_key}|{entitlement_date} vanished before update"
        )
