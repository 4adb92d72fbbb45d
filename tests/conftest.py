import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from messagely.config import Config, JWTConfig, DBConfig, SecurityConfig
from messagely.core.db_manager import SqliteDatabaseManager
from messagely.core.gateways import UserGateway, MessageGateway
from messagely.core.security import PasswordHasher
from messagely.core.tokens import TokenIssuer
from messagely.main import create_app


@pytest.fixture
def config(tmp_path):
    return Config(
        jwt=JWTConfig(secret_key="test-secret"),
        db=DBConfig(path=str(tmp_path / "messagely_test.db")),
        # bcrypt's minimum cost keeps the suite fast
        security=SecurityConfig(bcrypt_work_factor=4),
    )


@pytest.fixture
def password_hasher(config):
    return PasswordHasher(config.security.bcrypt_work_factor)


@pytest.fixture
def token_issuer(config):
    return TokenIssuer(config.jwt)


@pytest_asyncio.fixture
async def db_manager(config):
    manager = SqliteDatabaseManager(config)
    await manager.initialize()
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def user_gateway(db_manager, password_hasher):
    return UserGateway(db_manager, password_hasher)


@pytest.fixture
def message_gateway(db_manager):
    return MessageGateway(db_manager)


@pytest.fixture
def client(config):
    """Test client backed by a fresh SQLite file."""
    app = create_app(config)
    with TestClient(app) as test_client:
        yield test_client
