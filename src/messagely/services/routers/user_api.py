from fastapi import APIRouter, HTTPException, status, Depends
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from messagely.core.gateways import UserGateway
from ..models.user_api_models import (
    UserListResponse,
    UserDetailResponse,
    SentMessagesResponse,
    ReceivedMessagesResponse,
)
from .auth_api import AuthAPI


class UserAPI:
    """
    User directory and per-user mailbox endpoints.

    Listing users only needs a valid token; a profile and its sent/received
    messages are visible only to that user.
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI,
    ):
        self.logger = logger
        self.auth_api = auth_api

        self._user_router = APIRouter(prefix="/users", tags=["Users"])
        self._register_endpoints()

    @property
    def user_router(self) -> APIRouter:
        return self._user_router

    def get_router(self) -> APIRouter:
        return self._user_router

    def _register_endpoints(self):
        @self.user_router.get("", response_model=UserListResponse)
        @inject
        async def list_users(
                user_gateway: FromDishka[UserGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            await self.auth_api.get_current_user(token)
            users = await user_gateway.get_all_users()
            return UserListResponse(users=users)

        @self.user_router.get("/{username}", response_model=UserDetailResponse)
        @inject
        async def get_user(
                username: str,
                user_gateway: FromDishka[UserGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            await self.auth_api.ensure_correct_user(token, username)
            user = await user_gateway.get_user_by_name(username)
            if not user:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="User not found"
                )
            return UserDetailResponse(user=user)

        @self.user_router.get("/{username}/to", response_model=ReceivedMessagesResponse)
        @inject
        async def get_messages_to(
                username: str,
                user_gateway: FromDishka[UserGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            await self.auth_api.ensure_correct_user(token, username)
            messages = await user_gateway.get_messages_to(username)
            return ReceivedMessagesResponse(messages=messages)

        @self.user_router.get("/{username}/from", response_model=SentMessagesResponse)
        @inject
        async def get_messages_from(
                username: str,
                user_gateway: FromDishka[UserGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            await self.auth_api.ensure_correct_user(token, username)
            messages = await user_gateway.get_messages_from(username)
            return SentMessagesResponse(messages=messages)
