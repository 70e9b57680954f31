"""
Line Balancing API Routes.

Workspace, session and saved-session endpoints. Handlers are synchronous and
run on the thread pool; the application service serializes access to each
workspace. Domain errors are mapped to HTTP responses by the exception
handler registered in ``create_app``.
"""

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from line_balancing.api.deps import BalancingServiceDep
from line_balancing.application.dtos.balancing_dtos import (
    AssignRequest,
    HeadcountRequest,
    MoveRequest,
    OpenSavedSessionRequest,
    ProcessResponse,
    QuantityRequest,
    RenameOperatorRequest,
    SaveResponse,
    SessionViewResponse,
    StartSessionRequest,
    WorkspaceResponse,
)
from line_balancing.domain.balancing.services.assignment_controller import (
    AssignmentPrompt,
)
from line_balancing.domain.balancing.value_objects.records import SavedSessionSummary

router = APIRouter(prefix="/balancing", tags=["balancing"])


# Workspaces
@router.post(
    "/workspaces",
    status_code=status.HTTP_201_CREATED,
    response_model=WorkspaceResponse,
    summary="Open a balancing workspace",
)
def open_workspace(service: BalancingServiceDep) -> WorkspaceResponse:
    return service.open_workspace()


@router.get("/workspaces/{workspace_id}", response_model=WorkspaceResponse)
def get_workspace(workspace_id: UUID, service: BalancingServiceDep) -> WorkspaceResponse:
    return service.get_workspace(workspace_id)


@router.delete("/workspaces/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_workspace(workspace_id: UUID, service: BalancingServiceDep) -> Response:
    service.close_workspace(workspace_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Session lifecycle
@router.post(
    "/workspaces/{workspace_id}/session",
    response_model=SessionViewResponse,
    summary="Select a product and start balancing it",
)
def start_session(
    workspace_id: UUID, request: StartSessionRequest, service: BalancingServiceDep
) -> SessionViewResponse:
    return service.start_session(workspace_id, request.product_id, request.headcount)


@router.post(
    "/workspaces/{workspace_id}/session/load",
    response_model=SessionViewResponse,
    summary="Open a saved balancing for editing",
)
def open_saved_session(
    workspace_id: UUID, request: OpenSavedSessionRequest, service: BalancingServiceDep
) -> SessionViewResponse:
    return service.open_saved_session(workspace_id, request.saved_session_id)


@router.get("/workspaces/{workspace_id}/session", response_model=SessionViewResponse)
def get_session(
    workspace_id: UUID,
    service: BalancingServiceDep,
    process_id: str | None = Query(None, description="Only list pending operations of this process"),
) -> SessionViewResponse:
    return service.get_view(workspace_id, process_id=process_id)


@router.delete("/workspaces/{workspace_id}/session", response_model=WorkspaceResponse)
def discard_session(
    workspace_id: UUID, service: BalancingServiceDep
) -> WorkspaceResponse:
    return service.discard(workspace_id)


@router.post("/workspaces/{workspace_id}/session/save", response_model=SaveResponse)
def save_session(workspace_id: UUID, service: BalancingServiceDep) -> SaveResponse:
    return service.save(workspace_id)


# Session commands
@router.put(
    "/workspaces/{workspace_id}/session/headcount", response_model=SessionViewResponse
)
def change_headcount(
    workspace_id: UUID, request: HeadcountRequest, service: BalancingServiceDep
) -> SessionViewResponse:
    return service.change_headcount(workspace_id, request.headcount)


@router.get(
    "/workspaces/{workspace_id}/session/prompt",
    response_model=AssignmentPrompt,
    summary="Quantity prompt shown before placing an operation",
)
def prepare_assignment(
    workspace_id: UUID,
    service: BalancingServiceDep,
    operation_id: str = Query(...),
    operator_id: UUID = Query(...),
) -> AssignmentPrompt:
    return service.prepare_assignment(workspace_id, operation_id, operator_id)


@router.post(
    "/workspaces/{workspace_id}/session/assignments", response_model=SessionViewResponse
)
def assign_operation(
    workspace_id: UUID, request: AssignRequest, service: BalancingServiceDep
) -> SessionViewResponse:
    return service.assign(
        workspace_id, request.operation_id, request.operator_id, request.units_per_hour
    )


@router.patch(
    "/workspaces/{workspace_id}/session/operators/{operator_id}/assignments/{instance_id}",
    response_model=SessionViewResponse,
)
def change_quantity(
    workspace_id: UUID,
    operator_id: UUID,
    instance_id: UUID,
    request: QuantityRequest,
    service: BalancingServiceDep,
) -> SessionViewResponse:
    return service.change_quantity(
        workspace_id, operator_id, instance_id, request.units_per_hour
    )


@router.delete(
    "/workspaces/{workspace_id}/session/operators/{operator_id}/assignments/{instance_id}",
    response_model=SessionViewResponse,
)
def unassign_operation(
    workspace_id: UUID,
    operator_id: UUID,
    instance_id: UUID,
    service: BalancingServiceDep,
) -> SessionViewResponse:
    return service.unassign(workspace_id, operator_id, instance_id)


@router.post(
    "/workspaces/{workspace_id}/session/operators/{operator_id}/assignments/{instance_id}/move",
    response_model=SessionViewResponse,
)
def move_assignment(
    workspace_id: UUID,
    operator_id: UUID,
    instance_id: UUID,
    request: MoveRequest,
    service: BalancingServiceDep,
) -> SessionViewResponse:
    return service.move(
        workspace_id,
        instance_id,
        operator_id,
        request.to_operator_id,
        request.units_per_hour,
    )


@router.put(
    "/workspaces/{workspace_id}/session/operators/{operator_id}/name",
    response_model=SessionViewResponse,
)
def rename_operator(
    workspace_id: UUID,
    operator_id: UUID,
    request: RenameOperatorRequest,
    service: BalancingServiceDep,
) -> SessionViewResponse:
    return service.rename_operator(workspace_id, operator_id, request.display_name)


# Catalog and saved sessions
@router.get("/processes", response_model=list[ProcessResponse])
def list_processes(service: BalancingServiceDep) -> list[ProcessResponse]:
    return [
        ProcessResponse(process_id=p.process_id, name=p.name)
        for p in service.list_processes()
    ]


@router.get("/saved", response_model=list[SavedSessionSummary])
def list_saved_sessions(service: BalancingServiceDep) -> list[SavedSessionSummary]:
    return service.list_saved()


@router.delete("/saved/{saved_session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_saved_session(
    saved_session_id: UUID, service: BalancingServiceDep
) -> Response:
    service.delete_saved(saved_session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
