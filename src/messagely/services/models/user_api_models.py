from pydantic import BaseModel

from messagely.core.dto import UserDTO, UserSummaryDTO, SentMessageDTO, ReceivedMessageDTO


class UserListResponse(BaseModel):
    users: list[UserSummaryDTO]

class UserDetailResponse(BaseModel):
    user: UserDTO

class SentMessagesResponse(BaseModel):
    messages: list[SentMessageDTO]

class ReceivedMessagesResponse(BaseModel):
    messages: list[ReceivedMessageDTO]
