import pytest_asyncio
from datetime import datetime
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.depends import get_session
from src.adapter.services.notification_service import LoggingNotificationService
from src.domain.sensor import Sensor, SensorStatus
from src.domain.tariff import Tariff, TariffCategory
from src.domain.water_consumption import WaterConsumption
from src.worker.billing_scheduler import BillingSchedulerService


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create test database engine on a throwaway SQLite file"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'billing_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def scheduler(session_factory):
    """Scheduler bound to the test database; timers are stopped after the test"""
    service = BillingSchedulerService(
        session_factory,
        notification_service=LoggingNotificationService(),
        max_sleep_seconds=1,
    )
    yield service
    await service.stop()


@pytest_asyncio.fixture
async def client(db_session, scheduler):
    """Create test client with database session override"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig, scheduler=scheduler)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def billing_data(db_session):
    """
    One residential tariff and three sensors with February 2024 readings

    - MED-0001 (ACTIVE): 10,000 + 15,500 liters
    - MED-0002 (ACTIVE): 0 liters
    - MED-0003 (MAINTENANCE): 4,000 liters
    """
    category = TariffCategory(name="RESIDENTIAL", display_name="Residential")
    db_session.add(category)
    await db_session.flush()

    tariff = Tariff(
        tariff_category_id=category.id,
        name="Residential 2024",
        water_charge=Decimal("1.50"),
        sewerage_charge=Decimal("0.45"),
        fixed_charge=Decimal("8.50"),
        is_active=True,
    )
    db_session.add(tariff)

    sensors = [
        Sensor(meter_number="MED-0001", status=SensorStatus.ACTIVE, tariff_category_id=category.id, user_id=101),
        Sensor(meter_number="MED-0002", status=SensorStatus.ACTIVE, tariff_category_id=category.id, user_id=102),
        Sensor(meter_number="MED-0003", status=SensorStatus.MAINTENANCE, tariff_category_id=category.id, user_id=103),
    ]
    for sensor in sensors:
        db_session.add(sensor)

    readings = [
        ("MED-0001", datetime(2024, 2, 5, 10, 0), "110000", "100000", "10000"),
        ("MED-0001", datetime(2024, 2, 20, 10, 0), "125500", "110000", "15500"),
        ("MED-0002", datetime(2024, 2, 10, 10, 0), "50000", "50000", "0"),
        ("MED-0003", datetime(2024, 2, 12, 10, 0), "34000", "30000", "4000"),
    ]
    for serial, reading_date, amount, previous, consumption in readings:
        db_session.add(
            WaterConsumption(
                serial=serial,
                reading_date=reading_date,
                amount=Decimal(amount),
                previous_amount=Decimal(previous),
                consumption=Decimal(consumption),
            )
        )

    await db_session.commit()
    return {"category": category, "tariff": tariff, "sensors": sensors}
