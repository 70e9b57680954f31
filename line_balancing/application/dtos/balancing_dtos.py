"""
Balancing Data Transfer Objects.

Request and response models of the balancing API. They give the UI layer a
stable shape independent of the domain model.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from line_balancing.domain.balancing.entities.balancing_session import (
    BalancingSession,
    ReplayDiscrepancy,
)
from line_balancing.domain.balancing.value_objects.metrics import (
    BalancingMetrics,
    OccupancyBand,
)


class StartSessionRequest(BaseModel):
    """DTO for selecting a product to balance."""

    product_id: str = Field(..., min_length=1, description="Product to balance")
    headcount: int | None = Field(
        None, description="Number of operators, the configured default if omitted"
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"product_id": "SHIRT-001", "headcount": 4}}
    )


class OpenSavedSessionRequest(BaseModel):
    saved_session_id: UUID


class HeadcountRequest(BaseModel):
    headcount: int = Field(..., description="New number of operators")


class AssignRequest(BaseModel):
    """DTO for dropping an operation on an operator."""

    operation_id: str = Field(..., min_length=1)
    operator_id: UUID
    units_per_hour: int | None = Field(
        None, description="Units per hour to place, all pending units if omitted"
    )


class QuantityRequest(BaseModel):
    units_per_hour: int


class MoveRequest(BaseModel):
    to_operator_id: UUID
    units_per_hour: int | None = None


class RenameOperatorRequest(BaseModel):
    display_name: str = Field(..., max_length=100)


class CapacityResponse(BaseModel):
    operation_id: str
    name: str
    process_id: str | None
    standard_time_minutes: float
    total_units_per_hour: int
    assigned_units_per_hour: int
    pending_units_per_hour: int


class AssignmentResponse(BaseModel):
    instance_id: UUID
    operation_id: str
    assigned_units_per_hour: int


class OperatorResponse(BaseModel):
    operator_id: UUID
    display_name: str
    position: int
    occupied_minutes: float
    occupancy_percentage: float
    band: OccupancyBand
    assignments: list[AssignmentResponse]


class MetricsResponse(BaseModel):
    headcount: int
    total_standard_time: float
    units_per_hour: int
    takt_time: float
    required_machines: float
    average_occupancy: float
    occupancy_spread: float
    most_loaded_operator_id: UUID | None
    least_loaded_operator_id: UUID | None
    pending_units_total: int
    is_fully_assigned: bool
    degraded_operation_ids: list[str]


class ReplayDiscrepancyResponse(BaseModel):
    operator_id: UUID
    operation_id: str
    requested_units_per_hour: int
    applied_units_per_hour: int
    reason: str

    @classmethod
    def from_domain(cls, discrepancy: ReplayDiscrepancy) -> "ReplayDiscrepancyResponse":
        return cls(**discrepancy.model_dump())


class SessionViewResponse(BaseModel):
    """Everything a UI needs to render one balancing session."""

    workspace_id: UUID
    session_id: UUID
    product_id: str
    revision: int
    saved_session_id: UUID | None
    has_unsaved_changes: bool
    process_id: str | None = Field(None, description="Active process filter")
    available_process_ids: list[str]
    pending_operations: list[CapacityResponse]
    pool: list[CapacityResponse]
    operators: list[OperatorResponse]
    metrics: MetricsResponse
    replay_discrepancies: list[ReplayDiscrepancyResponse] = []
    events: list[str] = Field(
        default_factory=list, description="Events raised by the command"
    )

    @classmethod
    def build(
        cls,
        workspace_id: UUID,
        session: BalancingSession,
        metrics: BalancingMetrics,
        saved_session_id: UUID | None,
        has_unsaved_changes: bool,
        process_id: str | None = None,
        events: list[str] | None = None,
    ) -> "SessionViewResponse":
        pool = [
            CapacityResponse(
                operation_id=c.operation_id,
                name=c.operation.name,
                process_id=c.operation.process_id,
                standard_time_minutes=c.operation.standard_time_minutes,
                total_units_per_hour=c.total_units_per_hour,
                assigned_units_per_hour=c.assigned_units_per_hour,
                pending_units_per_hour=c.pending_units_per_hour,
            )
            for c in session.capacities
        ]
        pending_ids = {c.operation_id for c in session.pending_operations(process_id)}

        operators = []
        for slot in session.operators:
            load = metrics.load_for(slot.operator_id)
            operators.append(
                OperatorResponse(
                    operator_id=slot.operator_id,
                    display_name=slot.display_name,
                    position=slot.position,
                    occupied_minutes=load.occupied_minutes if load else 0.0,
                    occupancy_percentage=load.occupancy_percentage if load else 0.0,
                    band=load.band if load else OccupancyBand.UNDERLOADED,
                    assignments=[
                        AssignmentResponse(
                            instance_id=a.instance_id,
                            operation_id=a.operation_id,
                            assigned_units_per_hour=a.assigned_units_per_hour,
                        )
                        for a in slot.assignments
                    ],
                )
            )

        summary = metrics.summary
        return cls(
            workspace_id=workspace_id,
            session_id=session.id,
            product_id=session.product_id,
            revision=session.revision,
            saved_session_id=saved_session_id,
            has_unsaved_changes=has_unsaved_changes,
            process_id=process_id,
            available_process_ids=session.available_process_ids(),
            pending_operations=[c for c in pool if c.operation_id in pending_ids],
            pool=pool,
            operators=operators,
            metrics=MetricsResponse(
                headcount=metrics.headcount,
                total_standard_time=metrics.total_standard_time,
                units_per_hour=metrics.units_per_hour,
                takt_time=metrics.takt_time,
                required_machines=metrics.required_machines,
                average_occupancy=summary.average_occupancy,
                occupancy_spread=summary.occupancy_spread,
                most_loaded_operator_id=(
                    summary.most_loaded.operator_id if summary.most_loaded else None
                ),
                least_loaded_operator_id=(
                    summary.least_loaded.operator_id if summary.least_loaded else None
                ),
                pending_units_total=metrics.pending_units_total,
                is_fully_assigned=metrics.is_fully_assigned,
                degraded_operation_ids=list(metrics.degraded_operation_ids),
            ),
            replay_discrepancies=[
                ReplayDiscrepancyResponse.from_domain(d)
                for d in session.replay_discrepancies
            ],
            events=events or [],
        )


class WorkspaceResponse(BaseModel):
    workspace_id: UUID
    has_session: bool
    has_unsaved_changes: bool


class SaveResponse(BaseModel):
    saved_session_id: UUID
    revision: int


class ProcessResponse(BaseModel):
    process_id: str
    name: str
