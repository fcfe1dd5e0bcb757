import pytest

from stockledger.infrastructure.persistence.database import (
    create_tables,
    make_engine,
    make_session_factory,
)
from stockledger.infrastructure.persistence.sqlalchemy_unit_of_work import (
    SqlAlchemyUnitOfWork,
)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'stockledger-test.db'}"


@pytest.fixture
def engine(database_url):
    engine = make_engine(database_url)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def uow_factory(session_factory):
    return lambda: SqlAlchemyUnitOfWork(session_factory)
