"""
API Dependencies

Dependency injection for the balancing routes. The application service is
built once by the app factory and kept on ``app.state``.
"""

from typing import Annotated

from fastapi import Depends, Request

from line_balancing.application.services.balancing_service import (
    BalancingApplicationService,
)


def get_balancing_service(request: Request) -> BalancingApplicationService:
    return request.app.state.balancing_service


BalancingServiceDep = Annotated[
    BalancingApplicationService, Depends(get_balancing_service)
]
