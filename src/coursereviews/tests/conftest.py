import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from coursereviews.database import Base, DatabaseManager, InMemoryReviewStore, ReviewRepository
from coursereviews.service import ReviewService


@pytest_asyncio.fixture
async def test_db_manager():
    """Create a test database manager with in-memory SQLite."""
    # Use in-memory SQLite for testing
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Create session factory
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    # Create database manager
    db_manager = DatabaseManager()
    db_manager.engine = engine
    db_manager.async_session = async_session

    yield db_manager

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def review_repo(test_db_manager):
    """Create a relational review store for testing."""
    return ReviewRepository(test_db_manager)


@pytest_asyncio.fixture(params=["memory", "sql"])
async def review_store(request, test_db_manager):
    """Each store backing in turn."""
    if request.param == "memory":
        return InMemoryReviewStore()
    return ReviewRepository(test_db_manager)


@pytest.fixture
def review_service(review_store):
    return ReviewService(review_store)
