from collections.abc import Callable, Generator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from line_balancing.application.services.balancing_service import (
    BalancingApplicationService,
)
from line_balancing.core.config import Settings
from line_balancing.domain.balancing.entities.balancing_session import BalancingSession
from line_balancing.domain.balancing.events.domain_events import DomainEventDispatcher
from line_balancing.domain.balancing.repositories.operation_catalog import ProcessInfo
from line_balancing.domain.balancing.value_objects.operation import Operation
from line_balancing.infrastructure.database import models
from line_balancing.infrastructure.database.unit_of_work import UnitOfWorkManager

from .fakes import InMemoryBalancingGateway, InMemoryOperationCatalog, make_operations


@pytest.fixture
def session_factory() -> Callable[..., BalancingSession]:
    """Build a session from standard times, e.g. ``session_factory(1.0, headcount=2)``."""

    def build(*sams: float, headcount: int = 2, **kwargs) -> BalancingSession:
        session = BalancingSession.initialize(
            "P1", make_operations(*sams), headcount, **kwargs
        )
        session.clear_domain_events()
        return session

    return build


@pytest.fixture
def catalog() -> InMemoryOperationCatalog:
    return InMemoryOperationCatalog(
        products={
            "P1": make_operations(1.0),
            "P2": make_operations(1.0, 2.0, 0.5)
            + [
                Operation(
                    id="O4",
                    name="Pressing",
                    process_id="PRESS",
                    standard_time_minutes=1.5,
                )
            ],
            "EMPTY": [],
        },
        processes=[
            ProcessInfo(process_id="SEW", name="Sewing"),
            ProcessInfo(process_id="PRESS", name="Pressing"),
        ],
    )


@pytest.fixture
def gateway() -> InMemoryBalancingGateway:
    return InMemoryBalancingGateway()


@pytest.fixture
def dispatcher() -> DomainEventDispatcher:
    return DomainEventDispatcher()


@pytest.fixture
def settings() -> Settings:
    return Settings(DEFAULT_HEADCOUNT=2, ENABLE_METRICS=False, _env_file=None)


@pytest.fixture
def service(
    catalog: InMemoryOperationCatalog,
    gateway: InMemoryBalancingGateway,
    dispatcher: DomainEventDispatcher,
    settings: Settings,
) -> BalancingApplicationService:
    return BalancingApplicationService(
        catalog=catalog, gateway=gateway, dispatcher=dispatcher, settings=settings
    )


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite database with all tables and a small catalog."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        seed_catalog(session)
        session.commit()
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def uow_manager(engine: Engine) -> UnitOfWorkManager:
    return UnitOfWorkManager(lambda: Session(engine))


def seed_catalog(session: Session) -> None:
    session.add(models.Process(id="SEW", name="Sewing", sequence_order=1))
    session.add(models.Process(id="PRESS", name="Pressing", sequence_order=2))
    session.add(models.Product(id="P1", name="Shirt", reference="SH-01"))
    session.add(models.Product(id="P2", name="Trousers", reference="TR-01"))

    operations = [
        models.CatalogOperation(
            id="O1", name="Join shoulders", process_id="SEW", standard_time_minutes=1.0
        ),
        models.CatalogOperation(
            id="O2", name="Attach collar", process_id="SEW", standard_time_minutes=2.0
        ),
        models.CatalogOperation(
            id="O3", name="Press seams", process_id="PRESS", standard_time_minutes=0.5
        ),
        models.CatalogOperation(id="O4", name="Inspect", process_id=None),
    ]
    for operation in operations:
        session.add(operation)
    session.flush()

    sheet = models.OperationSheet(product_id="P1")
    session.add(sheet)
    session.flush()
    # Sequence deliberately differs from insertion order
    for operation_id, sequence in (("O2", 2), ("O1", 1), ("O3", 3), ("O4", 4)):
        session.add(
            models.OperationSheetItem(
                operation_sheet_id=sheet.id, operation_id=operation_id, sequence=sequence
            )
        )
