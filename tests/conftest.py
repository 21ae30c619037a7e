# tests/conftest.py

import pytest
from fastapi.testclient import TestClient

from matchpass.application.container import build_services
from matchpass.config import Settings
from matchpass.domain.models import NewMatch, NewTicketType
from matchpass.infrastructure.db.models import Base
from matchpass.infrastructure.db.session import build_engine, build_session_factory
from matchpass.infrastructure.repositories.memory import InMemoryStore
from matchpass.infrastructure.repositories.sql import SqlAlchemyStore
from matchpass.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'matchpass.db'}",
        bcrypt_rounds=4,
        log_level="DEBUG",
    )


# ---------------------
# STORES
# ---------------------

@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def sql_engine(settings):
    engine = build_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    return SqlAlchemyStore(build_session_factory(sql_engine))


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def services(store, settings):
    return build_services(store, settings)


@pytest.fixture
def client(services, settings):
    with TestClient(create_app(settings, services)) as test_client:
        yield test_client


# ---------------------
# CATALOG HELPERS
# ---------------------

@pytest.fixture
def match(services):
    return services.catalog.create_match(
        NewMatch(
            team1="Royal Challengers Bengaluru",
            team2="Delhi Capitals",
            venue="M. Chinnaswamy Stadium, Bengaluru, Karnataka",
            stadium="M. Chinnaswamy Stadium",
            date="10 April 2025",
            time="7:30 PM IST",
        )
    )


@pytest.fixture
def make_ticket_type(services, match):
    counter = iter(range(1, 1000))

    def _make(total_seats=10, price=99_900, name=None, match_id=None):
        return services.catalog.create_ticket_type(
            NewTicketType(
                match_id=match_id or match.id,
                name=name or f"Stand {next(counter)}",
                price=price,
                total_seats=total_seats,
            )
        )

    return _make
