from pydantic import BaseModel, Field
from datetime import datetime

from messagely.core.dto import MessageDTO, MessageDetailDTO


class MessageSendRequest(BaseModel):
    to_username: str = Field(..., min_length=1, max_length=50)
    body: str = Field(..., min_length=1)

class MessageResponse(BaseModel):
    message: MessageDTO

class MessageDetailResponse(BaseModel):
    message: MessageDetailDTO

class ReadReceipt(BaseModel):
    id: int
    read_at: datetime | None

class ReadResponse(BaseModel):
    message: ReadReceipt
