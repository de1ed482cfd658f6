import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from udao_mining.api.main import app
from udao_mining.database.connection import get_db
from udao_mining.models.balance import Balance
from udao_mining.models.base import Base
from udao_mining.models.supply import SupplyRecord
from udao_mining.runtime.dispatcher import ActionDispatcher
from udao_mining.services.accounts import AccountDirectory

TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

CONTRACT = "ultradaomining"
GENESIS = 1700000000
UDAO_MAX_SUPPLY = "21000000.00000000 UDAO"


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    import logging
    import structlog

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(),
    )

    root_logger = logging.getLogger()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def dispatcher(db_session):
    return ActionDispatcher(db_session, accounts=AccountDirectory(), contract=CONTRACT)


@pytest.fixture
def udao(dispatcher):
    """Dispatcher with the reward token created at GENESIS, issued by the contract"""
    dispatcher.push_action(
        "create",
        {"issuer": CONTRACT, "maximum_supply": UDAO_MAX_SUPPLY},
        [CONTRACT],
        GENESIS,
    )
    return dispatcher


@pytest.fixture
def assert_conserved(db_session):
    def _check(symbol_code: str):
        supply = SupplyRecord.find(db_session, symbol_code)
        assert Balance.get_total_supply(db_session, symbol_code) == supply.current_supply

    return _check
