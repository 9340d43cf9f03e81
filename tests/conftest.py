from collections.abc import AsyncGenerator
from datetime import date, datetime, time
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from clinic.core.db import get_session
from clinic.main import app
from clinic.models import Doctor, DoctorAvailability, Patient, WeekDay

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
WEDNESDAY = date(2030, 1, 9)
NOW = datetime(2030, 1, 1, 8, 0)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


async def _add_doctor(
    session: AsyncSession,
    full_name: str,
    fee: str,
    windows: list[tuple[WeekDay, time, time]],
    specialization: str = "General Medicine",
) -> Doctor:
    doctor = Doctor(full_name=full_name, specialization=specialization, consultation_fee=Decimal(fee))
    session.add(doctor)
    await session.flush()
    session.add_all(
        DoctorAvailability(doctor_id=doctor.id, day_of_week=day, start_time=start, end_time=end)
        for day, start, end in windows
    )
    await session.commit()
    return doctor


@pytest.fixture
async def patient(session) -> Patient:
    patient = Patient(full_name="Asha Rao", email="asha@example.com")
    session.add(patient)
    await session.commit()
    return patient


@pytest.fixture
async def doctor(session) -> Doctor:
    return await _add_doctor(
        session,
        "Dr. Meera Iyer",
        "500.00",
        [
            (WeekDay.MONDAY, time(9, 0), time(12, 0)),
            (WeekDay.TUESDAY, time(10, 0), time(11, 0)),
        ],
    )


@pytest.fixture
async def other_doctor(session) -> Doctor:
    return await _add_doctor(
        session,
        "Dr. Karan Shah",
        "750.00",
        [
            (WeekDay.MONDAY, time(9, 0), time(12, 0)),
            (WeekDay.TUESDAY, time(10, 0), time(12, 0)),
        ],
        specialization="Cardiology",
    )


@pytest.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
