"""
In-memory registry of balancing workspaces.

A workspace is one user's editing context. It holds at most one balancing
session at a time (none until a product is selected) plus the bookkeeping
needed to tell whether the session diverged from its saved copy.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from line_balancing.domain.balancing.entities.balancing_session import BalancingSession
from line_balancing.domain.shared.exceptions import WorkspaceNotFound


@dataclass
class Workspace:
    workspace_id: UUID = field(default_factory=uuid4)
    session: BalancingSession | None = None
    saved_session_id: UUID | None = None
    saved_revision: int | None = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def has_unsaved_changes(self) -> bool:
        if self.session is None:
            return False
        return self.saved_revision is None or self.session.revision != self.saved_revision

    def attach(
        self, session: BalancingSession, saved_session_id: UUID | None = None
    ) -> None:
        """Replace the workspace's session; a loaded session starts clean."""
        self.session = session
        self.saved_session_id = saved_session_id
        self.saved_revision = session.revision if saved_session_id else None

    def mark_saved(self, saved_session_id: UUID) -> None:
        self.saved_session_id = saved_session_id
        self.saved_revision = self.session.revision if self.session else None

    def detach(self) -> BalancingSession | None:
        session = self.session
        self.session = None
        self.saved_session_id = None
        self.saved_revision = None
        return session


class SessionRegistry:
    """Thread-safe map of workspace id to workspace."""

    def __init__(self) -> None:
        self._workspaces: dict[UUID, Workspace] = {}
        self._lock = threading.Lock()

    def create(self) -> Workspace:
        workspace = Workspace()
        with self._lock:
            self._workspaces[workspace.workspace_id] = workspace
        return workspace

    def get(self, workspace_id: UUID) -> Workspace:
        with self._lock:
            workspace = self._workspaces.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFound(workspace_id)
        return workspace

    def remove(self, workspace_id: UUID) -> Workspace:
        with self._lock:
            workspace = self._workspaces.pop(workspace_id, None)
        if workspace is None:
            raise WorkspaceNotFound(workspace_id)
        return workspace

    @contextmanager
    def locked(self, workspace_id: UUID) -> Iterator[Workspace]:
        """Hold the workspace's lock for the duration of the block."""
        workspace = self.get(workspace_id)
        with workspace.lock:
            yield workspace

    def __len__(self) -> int:
        with self._lock:
            return len(self._workspaces)
