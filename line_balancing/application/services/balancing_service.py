"""
Balancing application service for coordinating balancing use cases.

Orchestrates product selection, session commands, loading, saving and
discarding. Every command runs under the workspace lock; domain events are
published only after the command succeeded.
"""

from collections.abc import Callable
from typing import TypeVar
from uuid import UUID

from line_balancing.core.config import Settings, get_settings
from line_balancing.core.observability import get_logger, record_command, record_save
from line_balancing.domain.balancing.entities.balancing_session import BalancingSession
from line_balancing.domain.balancing.events.domain_events import (
    DomainEventDispatcher,
    SessionSaved,
    get_event_dispatcher,
)
from line_balancing.domain.balancing.repositories.balancing_gateway import (
    BalancingSessionGateway,
)
from line_balancing.domain.balancing.repositories.operation_catalog import (
    OperationCatalog,
    ProcessInfo,
)
from line_balancing.domain.balancing.services.assignment_controller import (
    AssignmentController,
    AssignmentPrompt,
)
from line_balancing.domain.balancing.services.balancing_calculator import (
    BalancingCalculator,
)
from line_balancing.domain.balancing.value_objects.metrics import (
    BalancingMetrics,
    OccupancyThresholds,
)
from line_balancing.domain.balancing.value_objects.records import (
    AssignmentRecord,
    OperatorRecord,
    SavedSessionSummary,
    SessionHeader,
)
from line_balancing.domain.shared.exceptions import (
    DomainError,
    ErrorType,
    PersistenceFailure,
    SessionNotActiveError,
)

from ..dtos.balancing_dtos import SaveResponse, SessionViewResponse, WorkspaceResponse
from .session_registry import SessionRegistry, Workspace

logger = get_logger(__name__)

T = TypeVar("T")


class BalancingApplicationService:
    """
    Application service for line balancing.

    Holds no session state itself: sessions live in workspaces of the
    ``SessionRegistry``.
    """

    def __init__(
        self,
        catalog: OperationCatalog,
        gateway: BalancingSessionGateway,
        registry: SessionRegistry | None = None,
        dispatcher: DomainEventDispatcher | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the balancing application service.

        Args:
            catalog: Source of product operation lists
            gateway: Persistence of saved sessions
            registry: Workspace registry, a fresh one if omitted
            dispatcher: Event dispatcher, the global one if omitted
            settings: Application settings, the cached ones if omitted
        """
        self._catalog = catalog
        self._gateway = gateway
        self._registry = registry or SessionRegistry()
        self._dispatcher = dispatcher or get_event_dispatcher()
        self._settings = settings or get_settings()
        self._calculator = BalancingCalculator(
            OccupancyThresholds(
                balanced_from=self._settings.OCCUPANCY_BALANCED_THRESHOLD,
                overloaded_above=self._settings.OCCUPANCY_OVERLOAD_THRESHOLD,
            )
        )

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    # Workspaces

    def open_workspace(self) -> WorkspaceResponse:
        workspace = self._registry.create()
        logger.debug("workspace_opened", workspace_id=str(workspace.workspace_id))
        return self._workspace_response(workspace)

    def get_workspace(self, workspace_id: UUID) -> WorkspaceResponse:
        with self._registry.locked(workspace_id) as workspace:
            return self._workspace_response(workspace)

    def close_workspace(self, workspace_id: UUID) -> None:
        workspace = self._registry.remove(workspace_id)
        if workspace.has_unsaved_changes:
            logger.info(
                "workspace_closed_with_unsaved_changes",
                workspace_id=str(workspace_id),
            )

    # Session lifecycle

    def start_session(
        self, workspace_id: UUID, product_id: str, headcount: int | None = None
    ) -> SessionViewResponse:
        """
        Select a product and build a fresh session for it.

        Any session already in the workspace is replaced.

        Raises:
            NoOperationListFound: If the product has no operation sheet
            InvalidProductState: If the operation list cannot be balanced
        """

        def command(workspace: Workspace) -> BalancingSession:
            operations = self._catalog.get_operations_for_product(product_id)
            session = BalancingSession.initialize(
                product_id,
                operations,
                headcount if headcount is not None else self._settings.DEFAULT_HEADCOUNT,
                operator_name_template=self._settings.OPERATOR_NAME_TEMPLATE,
            )
            self._replace_session(workspace, session)
            return session

        return self._execute_view(workspace_id, "start_session", command)

    def open_saved_session(
        self, workspace_id: UUID, saved_session_id: UUID
    ) -> SessionViewResponse:
        """
        Load a saved session for editing.

        Saved assignments that no longer fit the catalog are clamped or
        skipped and reported in ``replay_discrepancies``.

        Raises:
            SavedSessionNotFound: If the saved session does not exist
        """

        def command(workspace: Workspace) -> BalancingSession:
            saved = self._gateway.get_saved_assignments(saved_session_id)
            operations = self._catalog.get_operations_for_product(saved.product_id)
            session = BalancingSession.initialize(
                saved.product_id,
                operations,
                saved.headcount,
                existing=saved,
                operator_name_template=self._settings.OPERATOR_NAME_TEMPLATE,
            )
            self._replace_session(workspace, session, saved_session_id)
            return session

        return self._execute_view(workspace_id, "open_saved_session", command)

    def discard(self, workspace_id: UUID) -> WorkspaceResponse:
        """Drop the workspace's session without saving."""

        def command(workspace: Workspace) -> WorkspaceResponse:
            session = self._require_session(workspace)
            session.discard()
            workspace.detach()
            self._publish(session)
            return self._workspace_response(workspace)

        return self._execute(workspace_id, "discard", command)

    def save(self, workspace_id: UUID) -> SaveResponse:
        """
        Persist the workspace's session.

        On failure the in-memory session is left untouched so the save can be
        retried.

        Raises:
            PersistenceFailure: If the gateway could not store the session
        """

        def command(workspace: Workspace) -> SaveResponse:
            session = self._require_session(workspace)
            metrics = self._calculator.calculate(session.snapshot())
            header, operators = self._to_records(session, metrics)

            try:
                saved_id = self._gateway.save_session(
                    header, operators, workspace.saved_session_id
                )
            except PersistenceFailure:
                record_save("failed")
                raise

            record_save("saved")
            workspace.mark_saved(saved_id)
            session.add_domain_event(
                SessionSaved(
                    aggregate_id=session.id,
                    saved_session_id=saved_id,
                    revision=session.revision,
                )
            )
            self._publish(session)
            return SaveResponse(saved_session_id=saved_id, revision=session.revision)

        return self._execute(workspace_id, "save", command)

    # Session commands

    def get_view(
        self, workspace_id: UUID, process_id: str | None = None
    ) -> SessionViewResponse:
        with self._registry.locked(workspace_id) as workspace:
            session = self._require_session(workspace)
            return self._view(workspace, session, process_id=process_id)

    def change_headcount(self, workspace_id: UUID, headcount: int) -> SessionViewResponse:
        return self._execute_view(
            workspace_id,
            "change_headcount",
            lambda workspace: self._require_session(workspace).resize_headcount(headcount),
        )

    def prepare_assignment(
        self, workspace_id: UUID, operation_id: str, operator_id: UUID
    ) -> AssignmentPrompt:
        with self._registry.locked(workspace_id) as workspace:
            controller = AssignmentController(self._require_session(workspace))
            return controller.prepare(operation_id, operator_id)

    def assign(
        self,
        workspace_id: UUID,
        operation_id: str,
        operator_id: UUID,
        units: int | None = None,
    ) -> SessionViewResponse:
        return self._execute_view(
            workspace_id,
            "assign",
            lambda workspace: self._controller(workspace).place(
                operation_id, operator_id, units
            ),
        )

    def change_quantity(
        self, workspace_id: UUID, operator_id: UUID, instance_id: UUID, units: int
    ) -> SessionViewResponse:
        return self._execute_view(
            workspace_id,
            "change_quantity",
            lambda workspace: self._controller(workspace).change_quantity(
                operator_id, instance_id, units
            ),
        )

    def unassign(
        self, workspace_id: UUID, operator_id: UUID, instance_id: UUID
    ) -> SessionViewResponse:
        return self._execute_view(
            workspace_id,
            "unassign",
            lambda workspace: self._controller(workspace).remove(operator_id, instance_id),
        )

    def move(
        self,
        workspace_id: UUID,
        instance_id: UUID,
        from_operator_id: UUID,
        to_operator_id: UUID,
        units: int | None = None,
    ) -> SessionViewResponse:
        return self._execute_view(
            workspace_id,
            "move",
            lambda workspace: self._controller(workspace).move(
                instance_id, from_operator_id, to_operator_id, units
            ),
        )

    def rename_operator(
        self, workspace_id: UUID, operator_id: UUID, display_name: str
    ) -> SessionViewResponse:
        return self._execute_view(
            workspace_id,
            "rename_operator",
            lambda workspace: self._require_session(workspace).rename_operator(
                operator_id, display_name
            ),
        )

    # Catalog and saved sessions

    def list_processes(self) -> list[ProcessInfo]:
        return self._catalog.list_processes()

    def list_saved(self) -> list[SavedSessionSummary]:
        return self._gateway.list_sessions()

    def delete_saved(self, saved_session_id: UUID) -> None:
        self._gateway.delete_session(saved_session_id)
        logger.info("saved_session_deleted", saved_session_id=str(saved_session_id))

    # Internals

    def _execute(
        self, workspace_id: UUID, command_name: str, command: Callable[[Workspace], T]
    ) -> T:
        with self._registry.locked(workspace_id) as workspace:
            try:
                result = command(workspace)
            except DomainError as e:
                outcome = "declined" if e.error_type == ErrorType.VALIDATION else "rejected"
                record_command(command_name, outcome)
                logger.info(
                    "balancing_command_failed",
                    command=command_name,
                    workspace_id=str(workspace_id),
                    outcome=outcome,
                    error=e.__class__.__name__,
                    message=e.message,
                )
                raise
            record_command(command_name, "applied")
            return result

    def _execute_view(
        self,
        workspace_id: UUID,
        command_name: str,
        command: Callable[[Workspace], object],
    ) -> SessionViewResponse:
        def run(workspace: Workspace) -> SessionViewResponse:
            command(workspace)
            session = self._require_session(workspace)
            events = self._publish(session)
            logger.debug(
                "balancing_command_applied",
                command=command_name,
                workspace_id=str(workspace_id),
                revision=session.revision,
            )
            return self._view(workspace, session, events=events)

        return self._execute(workspace_id, command_name, run)

    def _replace_session(
        self,
        workspace: Workspace,
        session: BalancingSession,
        saved_session_id: UUID | None = None,
    ) -> None:
        if workspace.has_unsaved_changes:
            logger.info(
                "unsaved_session_replaced",
                workspace_id=str(workspace.workspace_id),
                product_id=workspace.session.product_id,
            )
        workspace.attach(session, saved_session_id)

    def _require_session(self, workspace: Workspace) -> BalancingSession:
        if workspace.session is None:
            raise SessionNotActiveError(workspace.workspace_id, "uninitialized")
        return workspace.session

    def _controller(self, workspace: Workspace) -> AssignmentController:
        return AssignmentController(self._require_session(workspace))

    def _publish(self, session: BalancingSession) -> list[str]:
        events = session.pull_domain_events()
        self._dispatcher.dispatch_all(events)
        return [event.event_type for event in events]

    def _view(
        self,
        workspace: Workspace,
        session: BalancingSession,
        process_id: str | None = None,
        events: list[str] | None = None,
    ) -> SessionViewResponse:
        return SessionViewResponse.build(
            workspace_id=workspace.workspace_id,
            session=session,
            metrics=self._calculator.calculate(session.snapshot()),
            saved_session_id=workspace.saved_session_id,
            has_unsaved_changes=workspace.has_unsaved_changes,
            process_id=process_id,
            events=events,
        )

    def _workspace_response(self, workspace: Workspace) -> WorkspaceResponse:
        return WorkspaceResponse(
            workspace_id=workspace.workspace_id,
            has_session=workspace.session is not None,
            has_unsaved_changes=workspace.has_unsaved_changes,
        )

    @staticmethod
    def _to_records(
        session: BalancingSession, metrics: BalancingMetrics
    ) -> tuple[SessionHeader, list[OperatorRecord]]:
        header = SessionHeader(
            product_id=session.product_id,
            headcount=session.headcount,
            total_standard_time=metrics.total_standard_time,
            units_per_hour=metrics.units_per_hour,
            takt_time=metrics.takt_time,
            required_machines=metrics.required_machines,
        )
        operators = []
        for slot in session.operators:
            load = metrics.load_for(slot.operator_id)
            operators.append(
                OperatorRecord(
                    operator_id=slot.operator_id,
                    display_name=slot.display_name,
                    occupied_minutes=load.occupied_minutes if load else 0.0,
                    occupancy_percentage=load.occupancy_percentage if load else 0.0,
                    assignments=tuple(
                        AssignmentRecord(
                            operation_id=a.operation_id,
                            assigned_units_per_hour=a.assigned_units_per_hour,
                        )
                        for a in slot.assignments
                    ),
                )
            )
        return header, operators
