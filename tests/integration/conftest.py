from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from src.app.use_cases.credits import GrantCreditsCommandDTO
from src.depends import Services
from src.domain.class_instance import ClassInstance
from src.domain.class_template import ClassTemplate
from src.domain.user import User
from src.domain.venue import Venue

NOW = datetime(2024, 6, 1, 9, 0, 0)


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite database, recreated for every test"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'classbook_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


class FixedClock:
    """Settable stand-in for datetime.utcnow"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest_asyncio.fixture
async def services(db_session, clock):
    return Services(db_session, clock=clock)


@pytest_asyncio.fixture
async def catalog(db_session):
    """
    One venue, one template and one scheduled instance two days out

    Template: 1000 cents, a boolean equipment question (+200 cents) and a
    single-select mat question (+50 cents for "premium").
    """
    venue = Venue(
        id="venue_1",
        business_id="biz_1",
        name="Riverside Studio",
        address={"street": "1 River Rd", "city": "Springfield", "zip_code": "12345", "country": "US"},
    )
    template = ClassTemplate(
        id="tpl_1",
        business_id="biz_1",
        venue_id="venue_1",
        name="Morning Flow",
        description="Gentle vinyasa",
        instructor="Sam",
        price=1000,
        cancellation_window_hours=24,
        questionnaire=[
            {
                "id": "equipment",
                "question": "Rent equipment?",
                "type": "boolean",
                "required": True,
                "boolean_config": {"fee_on_true": 200},
            },
            {
                "id": "mat",
                "question": "Mat type",
                "type": "single_select",
                "options": [
                    {"id": "standard", "label": "Standard"},
                    {"id": "premium", "label": "Premium", "fee": 50},
                ],
            },
        ],
    )
    start = NOW + timedelta(days=2)
    instance = ClassInstance(
        id="ci_1",
        template_id="tpl_1",
        venue_id="venue_1",
        business_id="biz_1",
        name="Morning Flow",
        description="Gentle vinyasa",
        instructor="Sam",
        start_time=start,
        end_time=start + timedelta(hours=1),
        capacity=10,
        template_snapshot={"name": "Morning Flow", "instructor": "Sam"},
        venue_snapshot={"name": "Riverside Studio", "address": dict(venue.address)},
    )
    db_session.add_all([venue, template, instance])
    await db_session.commit()
    return venue, template, instance


@pytest_asyncio.fixture
async def consumer(db_session):
    user = User(id="usr_1", name="Alex", email="alex@example.com", has_consumer_onboarded=True)
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def fund(services):
    """Grant credits to a consumer from the payment processor account"""

    async def _fund(user_id: str, amount, key: str = None):
        result = await services.grant_credits.execute(
            GrantCreditsCommandDTO(
                user_id=user_id,
                amount=Decimal(str(amount)),
                idempotency_key=key or f"purchase:{user_id}:{amount}",
            )
        )
        assert result.is_ok(), result.error
        return result.value

    return _fund
