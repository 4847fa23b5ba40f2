"""
roster_services -- orchestration of engine runs.

    EngineRunner         one run across all active workspaces
    WorkspaceProcessor   one workspace: resolve, then persist atomically
"""

from roster_services.engine_runner import (
    EngineRunner,
    RunSummary,
    WorkspaceFailure,
    workspace_opener,
)
from roster_services.workspace_processor import (
    RosterBatch,
    WorkspaceOutcome,
    WorkspaceProcessor,
)

__all__ = [
    "EngineRunner",
    "RosterBatch",
    "RunSummary",
    "WorkspaceFailure",
    "WorkspaceOutcome",
    "WorkspaceProcessor",
    "workspace_opener",
]
