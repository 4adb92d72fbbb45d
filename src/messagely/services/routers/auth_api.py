from fastapi import status, HTTPException, APIRouter
from fastapi.security import OAuth2PasswordBearer

from dishka import FromDishka
from dishka.integrations.fastapi import inject

import logging

from messagely.core.errors import InvalidCredentialsError, InvalidTokenError
from messagely.core.gateways import UserGateway
from messagely.core.tokens import TokenIssuer
from ..models.auth_api_models import LoginRequest, UserRegisterRequest, TokenResponse


class AuthAPI:
    """
    Authentication API service that handles registration, login and
    bearer-token validation for the other routers.
    Attributes:
        token_issuer (TokenIssuer): Signs and verifies access tokens
        logger (logging.Logger): Logger instance
        oauth2_scheme (OAuth2PasswordBearer): Bearer token extractor
        _auth_router (APIRouter): FastAPI router for authentication endpoints
    """
    def __init__(
            self,
            token_issuer: TokenIssuer,
            logger: logging.Logger
    ):
        self.token_issuer = token_issuer
        self.logger = logger
        self.oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login")
        self._auth_router = APIRouter(tags=["Authentication"])
        self._register_endpoints()

    @property
    def auth_router(self) -> APIRouter:
        return self._auth_router

    def get_router(self) -> APIRouter:
        return self._auth_router

    async def get_current_user(self, token: str) -> str:
        """
        Validate JWT token and extract the username.
        Args:
            token: JWT token string
        Returns:
            str: Username asserted by the token
        Raises:
            HTTPException: If token is invalid, expired, or has wrong type
        """
        try:
            payload = self.token_issuer.verify(token)
        except InvalidTokenError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=e.message,
                headers={"WWW-Authenticate": "Bearer"},
            ) from e
        return payload["username"]

    async def ensure_correct_user(self, token: str, username: str) -> str:
        """
        Validate token and check that it belongs to the given user.
        Raises:
            HTTPException: 401 if the token is invalid or belongs to someone else
        """
        current_user = await self.get_current_user(token)
        if current_user != username:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized"
            )
        return current_user

    def _register_endpoints(self):
        @self.auth_router.post("/login", response_model=TokenResponse)
        @inject
        async def login(
                login_data: LoginRequest,
                user_gateway: FromDishka[UserGateway]
        ):
            """
            Login with username and password, updating last-login.
            Returns: TokenResponse: JWT access token
            """
            if not await user_gateway.authenticate(login_data.username, login_data.password):
                raise InvalidCredentialsError()

            await user_gateway.update_login_timestamp(login_data.username)
            self.logger.info("User %s logged in", login_data.username)
            return TokenResponse(token=self.token_issuer.issue(login_data.username))

        @self.auth_router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
        @inject
        async def register(
                user_data: UserRegisterRequest,
                user_gateway: FromDishka[UserGateway]
        ):
            """
            Register a new user and log them in.
            Returns: TokenResponse: JWT access token
            """
            user = await user_gateway.register_user(
                username=user_data.username,
                password=user_data.password,
                first_name=user_data.first_name,
                last_name=user_data.last_name,
                phone=user_data.phone
            )
            return TokenResponse(token=self.token_issuer.issue(user.username))
