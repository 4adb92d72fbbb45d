from dishka import Provider, Scope, provide, from_context
from typing import AsyncIterable
import logging

from messagely.config import Config
from messagely.core.db_manager import BaseDatabaseManager, create_db_manager
from messagely.core.gateways import UserGateway, MessageGateway
from messagely.core.security import PasswordHasher

class AdaptersProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_logger(self) -> logging.Logger:
        return logging.getLogger("messagely")

    @provide(scope=Scope.APP)
    def get_password_hasher(self, config: Config, logger: logging.Logger) -> PasswordHasher:
        return PasswordHasher(config.security.bcrypt_work_factor, logger)

    @provide(scope=Scope.APP)
    async def get_db_manager(self, config: Config) -> AsyncIterable[BaseDatabaseManager]:
        db_manager = create_db_manager(config)
        await db_manager.initialize()
        await db_manager.create_tables()
        yield db_manager
        await db_manager.close()

class GatewaysProvider(Provider):
    @provide(scope=Scope.REQUEST)
    def get_user_gateway(
            self,
            db_manager: BaseDatabaseManager,
            password_hasher: PasswordHasher,
            logger: logging.Logger
    ) -> UserGateway:
        return UserGateway(db_manager, password_hasher, logger)

    @provide(scope=Scope.REQUEST)
    def get_message_gateway(
            self,
            db_manager: BaseDatabaseManager,
            logger: logging.Logger
    ) -> MessageGateway:
        return MessageGateway(db_manager, logger)
