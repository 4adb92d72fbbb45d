import logging
from contextlib import asynccontextmanager

from dishka import make_async_container
from dishka.integrations.fastapi import setup_dishka
from fastapi import FastAPI
import uvicorn

from messagely.config import Config, load_config
from messagely.core.tokens import TokenIssuer
from messagely.providers.dishka_app import AdaptersProvider, GatewaysProvider
from messagely.services import AuthAPI, UserAPI, MessageAPI
from messagely.services.handlers import register_exception_handlers


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()


def create_app(config: Config) -> FastAPI:
    logger = logging.getLogger("messagely")

    container = make_async_container(
        AdaptersProvider(),
        GatewaysProvider(),
        context={Config: config},
    )

    app = FastAPI(title="messagely", lifespan=lifespan)
    setup_dishka(container, app)
    register_exception_handlers(app, logger)

    auth_api = AuthAPI(token_issuer=TokenIssuer(config.jwt, logger), logger=logger)
    user_api = UserAPI(logger=logger, auth_api=auth_api)
    message_api = MessageAPI(logger=logger, auth_api=auth_api)

    app.include_router(auth_api.get_router())
    app.include_router(user_api.get_router())
    app.include_router(message_api.get_router())

    return app


def main():
    config = load_config(".env")
    setup_logging(config.logging.level)
    app = create_app(config)
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level=config.logging.level.lower())


if __name__ == "__main__":
    main()
