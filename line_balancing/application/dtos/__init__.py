"""Data Transfer Objects of the balancing API."""

from .balancing_dtos import (
    AssignmentResponse,
    AssignRequest,
    CapacityResponse,
    HeadcountRequest,
    MetricsResponse,
    MoveRequest,
    OpenSavedSessionRequest,
    OperatorResponse,
    ProcessResponse,
    QuantityRequest,
    RenameOperatorRequest,
    ReplayDiscrepancyResponse,
    SaveResponse,
    SessionViewResponse,
    StartSessionRequest,
    WorkspaceResponse,
)

__all__ = [
    "AssignRequest",
    "AssignmentResponse",
    "CapacityResponse",
    "HeadcountRequest",
    "MetricsResponse",
    "MoveRequest",
    "OpenSavedSessionRequest",
    "OperatorResponse",
    "ProcessResponse",
    "QuantityRequest",
    "RenameOperatorRequest",
    "ReplayDiscrepancyResponse",
    "SaveResponse",
    "SessionViewResponse",
    "StartSessionRequest",
    "WorkspaceResponse",
]
