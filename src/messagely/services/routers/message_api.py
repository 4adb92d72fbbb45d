from fastapi import APIRouter, HTTPException, status, Depends
from dishka.integrations.fastapi import inject
from dishka import FromDishka
import logging

from messagely.core.gateways import MessageGateway
from ..models.message_api_models import (
    MessageSendRequest,
    MessageResponse,
    MessageDetailResponse,
    ReadReceipt,
    ReadResponse,
)
from .auth_api import AuthAPI


class MessageAPI:
    """
    Message API handler for direct database operations.

    Provides endpoints for sending a message, viewing one message and
    marking a received message as read.

    Attributes:
        logger: Logger instance for tracking operations
        auth_api: Authentication API instance for user validation
        message_router: FastAPI router containing message endpoints
    """

    def __init__(
            self,
            logger: logging.Logger,
            auth_api: AuthAPI,
    ):
        self.logger = logger
        self.auth_api = auth_api

        self._message_router = APIRouter(prefix="/messages", tags=["Messages"])
        self._register_endpoints()

    @property
    def message_router(self) -> APIRouter:
        return self._message_router

    def get_router(self) -> APIRouter:
        return self._message_router

    def _register_endpoints(self):
        @self.message_router.get("/{message_id}", response_model=MessageDetailResponse)
        @inject
        async def get_message(
                message_id: int,
                message_gateway: FromDishka[MessageGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            username = await self.auth_api.get_current_user(token)

            message = await message_gateway.get_message_detail(message_id)
            if not message:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Message not found"
                )

            # Only the sender or the recipient may view a message
            if username not in (message.from_user.username, message.to_user.username):
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Cannot read this message"
                )

            return MessageDetailResponse(message=message)

        @self.message_router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
        @inject
        async def send_message(
                message_data: MessageSendRequest,
                message_gateway: FromDishka[MessageGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            from_username = await self.auth_api.get_current_user(token)

            message = await message_gateway.send_message(
                from_username=from_username,
                to_username=message_data.to_username,
                body=message_data.body
            )
            self.logger.info("Message %s sent from %s to %s", message.id, from_username, message.to_username)

            return MessageResponse(message=message)

        @self.message_router.post("/{message_id}/read", response_model=ReadResponse)
        @inject
        async def mark_read(
                message_id: int,
                message_gateway: FromDishka[MessageGateway],
                token: str = Depends(self.auth_api.oauth2_scheme)
        ):
            username = await self.auth_api.get_current_user(token)

            message = await message_gateway.mark_as_read(message_id, username)

            return ReadResponse(message=ReadReceipt(id=message.id, read_at=message.read_at))
