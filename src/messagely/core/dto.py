from pydantic import BaseModel
from datetime import datetime


class UserSummaryDTO(BaseModel):
    username: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None

class UserDTO(UserSummaryDTO):
    join_at: datetime | None = None
    last_login_at: datetime | None = None

class MessageDTO(BaseModel):
    id: int
    from_username: str
    to_username: str
    body: str
    sent_at: datetime
    read_at: datetime | None = None

class SentMessageDTO(BaseModel):
    id: int
    body: str
    sent_at: datetime
    read_at: datetime | None = None
    to_user: UserSummaryDTO

class ReceivedMessageDTO(BaseModel):
    id: int
    body: str
    sent_at: datetime
    read_at: datetime | None = None
    from_user: UserSummaryDTO

class MessageDetailDTO(BaseModel):
    id: int
    body: str
    sent_at: datetime
    read_at: datetime | None = None
    from_user: UserSummaryDTO
    to_user: UserSummaryDTO
