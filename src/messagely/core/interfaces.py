from abc import ABC, abstractmethod
from datetime import datetime

from .dto import (
    UserDTO,
    UserSummaryDTO,
    MessageDTO,
    SentMessageDTO,
    ReceivedMessageDTO,
    MessageDetailDTO,
)

class UserInterface(ABC):
    @abstractmethod
    async def register_user(
            self,
            username: str,
            password: str,
            first_name: str | None,
            last_name: str | None,
            phone: str | None
    ) -> UserDTO:
        """
        Hashes the password and creates a new user.
        :param username:
        :param password:
        :param first_name:
        :param last_name:
        :param phone:
        :return: Created user, without password
        """
        raise NotImplementedError()

    @abstractmethod
    async def authenticate(
            self,
            username: str,
            password: str
    ) -> bool:
        """
        Is this username/password valid?
        :param username:
        :param password:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def update_login_timestamp(
            self,
            username: str
    ) -> datetime:
        """
        Sets User.last_login_at to now.
        :param username:
        :return: New last_login_at
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_all_users(self) -> list[UserSummaryDTO]:
        """
        Basic info on all users.
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_user_by_name(
            self,
            username: str
    ) -> UserDTO | None:
        """
        Get user by User.username
        :param username:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_messages_from(
            self,
            username: str
    ) -> list[SentMessageDTO]:
        """
        Messages sent by a user, each with the recipient's profile.
        :param username:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_messages_to(
            self,
            username: str
    ) -> list[ReceivedMessageDTO]:
        """
        Messages received by a user, each with the sender's profile.
        :param username:
        :return:
        """
        raise NotImplementedError()


class MessageInterface(ABC):
    @abstractmethod
    async def send_message(
            self,
            from_username: str,
            to_username: str,
            body: str
    ) -> MessageDTO:
        """
        Creates a new message in the database.
        :param from_username:
        :param to_username:
        :param body:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_message_by_id(
            self,
            message_id: int
    ) -> MessageDTO | None:
        """
        Gets a message by ID.
        :param message_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def get_message_detail(
            self,
            message_id: int
    ) -> MessageDetailDTO | None:
        """
        Gets a message by ID with sender and recipient profiles.
        :param message_id:
        :return:
        """
        raise NotImplementedError()

    @abstractmethod
    async def mark_as_read(
            self,
            message_id: int,
            reader_username: str
    ) -> MessageDTO:
        """
        Marks a message as read by its recipient.
        :param message_id:
        :param reader_username:
        :return:
        """
        raise NotImplementedError()
