"""
Balancing Session Gateway Interface

Defines the contract for loading and storing balancing sessions.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from uuid import UUID

from ..value_objects.records import (
    OperatorRecord,
    SavedSession,
    SavedSessionSummary,
    SessionHeader,
)


class BalancingSessionGateway(ABC):
    """
    Abstract persistence gateway for balancing sessions.

    A save replaces every record of the session in one transaction.
    """

    @abstractmethod
    def save_session(
        self,
        header: SessionHeader,
        operators: Sequence[OperatorRecord],
        session_id: UUID | None = None,
    ) -> UUID:
        """
        Store a balancing session.

        Args:
            header: Session header with the aggregate metrics
            operators: Operators with their occupancy and assignments
            session_id: Saved session to replace, None to create a new one

        Returns:
            ID of the stored session

        Raises:
            SavedSessionNotFound: If session_id does not exist
            PersistenceFailure: If the records could not be stored
        """
        pass

    @abstractmethod
    def get_saved_assignments(self, session_id: UUID) -> SavedSession:
        """
        Load a saved session for editing.

        Raises:
            SavedSessionNotFound: If the session does not exist
        """
        pass

    @abstractmethod
    def list_sessions(self) -> list[SavedSessionSummary]:
        """List saved sessions, newest first."""
        pass

    @abstractmethod
    def delete_session(self, session_id: UUID) -> None:
        """
        Delete a saved session with all its operator and assignment records.

        Raises:
            SavedSessionNotFound: If the session does not exist
            PersistenceFailure: If the records could not be deleted
        """
        pass
