"""In-memory implementations of the balancing ports for tests."""

from collections.abc import Sequence
from datetime import datetime, timezone
from uuid import UUID, uuid4

from line_balancing.domain.balancing.repositories.balancing_gateway import (
    BalancingSessionGateway,
)
from line_balancing.domain.balancing.repositories.operation_catalog import (
    OperationCatalog,
    ProcessInfo,
)
from line_balancing.domain.balancing.value_objects.operation import Operation
from line_balancing.domain.balancing.value_objects.records import (
    OperatorRecord,
    SavedAssignment,
    SavedOperator,
    SavedSession,
    SavedSessionSummary,
    SessionHeader,
)
from line_balancing.domain.shared.exceptions import (
    NoOperationListFound,
    PersistenceFailure,
    SavedSessionNotFound,
)


def make_operations(*sams: float, process_id: str | None = "SEW") -> list[Operation]:
    """Operations O1..On with the given standard times."""
    return [
        Operation(
            id=f"O{i}",
            name=f"Operation {i}",
            process_id=process_id,
            standard_time_minutes=sam,
        )
        for i, sam in enumerate(sams, start=1)
    ]


class InMemoryOperationCatalog(OperationCatalog):
    def __init__(
        self,
        products: dict[str, list[Operation]] | None = None,
        processes: list[ProcessInfo] | None = None,
    ) -> None:
        self.products = products or {}
        self.processes = processes or []

    def get_operations_for_product(self, product_id: str) -> list[Operation]:
        if product_id not in self.products:
            raise NoOperationListFound(product_id)
        return list(self.products[product_id])

    def list_processes(self) -> list[ProcessInfo]:
        return list(self.processes)


class InMemoryBalancingGateway(BalancingSessionGateway):
    def __init__(self) -> None:
        self.headers: dict[UUID, SessionHeader] = {}
        self.operators: dict[UUID, list[OperatorRecord]] = {}
        self.created_at: dict[UUID, datetime] = {}
        self.fail_next_save = False
        self.save_calls = 0

    def save_session(
        self,
        header: SessionHeader,
        operators: Sequence[OperatorRecord],
        session_id: UUID | None = None,
    ) -> UUID:
        self.save_calls += 1
        if self.fail_next_save:
            self.fail_next_save = False
            raise PersistenceFailure("database unavailable", session_id)
        if session_id is not None and session_id not in self.headers:
            raise SavedSessionNotFound(session_id)
        saved_id = session_id or uuid4()
        self.headers[saved_id] = header
        self.operators[saved_id] = list(operators)
        self.created_at.setdefault(saved_id, datetime.now(timezone.utc))
        return saved_id

    def get_saved_assignments(self, session_id: UUID) -> SavedSession:
        if session_id not in self.headers:
            raise SavedSessionNotFound(session_id)
        header = self.headers[session_id]
        operators = self.operators[session_id]
        return SavedSession(
            session_id=session_id,
            product_id=header.product_id,
            headcount=header.headcount,
            operators=tuple(
                SavedOperator(operator_id=o.operator_id, display_name=o.display_name)
                for o in operators
            ),
            assignments=tuple(
                SavedAssignment(
                    operator_id=o.operator_id,
                    operation_id=a.operation_id,
                    assigned_units_per_hour=a.assigned_units_per_hour,
                )
                for o in operators
                for a in o.assignments
            ),
        )

    def list_sessions(self) -> list[SavedSessionSummary]:
        summaries = [
            SavedSessionSummary(
                session_id=session_id,
                code=f"BAL-{session_id.hex[:8].upper()}",
                product_id=header.product_id,
                headcount=header.headcount,
                total_standard_time=header.total_standard_time,
                units_per_hour=header.units_per_hour,
                required_machines=header.required_machines,
                created_at=self.created_at[session_id],
            )
            for session_id, header in self.headers.items()
        ]
        return sorted(summaries, key=lambda s: s.created_at, reverse=True)

    def delete_session(self, session_id: UUID) -> None:
        if session_id not in self.headers:
            raise SavedSessionNotFound(session_id)
        del self.headers[session_id]
        del self.operators[session_id]
        del self.created_at[session_id]
