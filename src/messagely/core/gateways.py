from datetime import datetime

from sqlalchemy import select, insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import aliased
import logging

from .database import User, Message, utcnow
from .interfaces import UserInterface, MessageInterface
from .dto import (
    UserDTO,
    UserSummaryDTO,
    MessageDTO,
    SentMessageDTO,
    ReceivedMessageDTO,
    MessageDetailDTO,
)
from .errors import (
    ValidationError,
    DuplicateUsernameError,
    InvalidReferenceError,
    ForbiddenError,
    NotFoundError,
    StorageError,
)
from .security import PasswordHasher
from .db_manager import BaseDatabaseManager


def _user_dto(user: User) -> UserDTO:
    return UserDTO(
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        phone=user.phone,
        join_at=user.join_at,
        last_login_at=user.last_login_at
    )

def _summary_dto(row) -> UserSummaryDTO:
    return UserSummaryDTO(
        username=row.username,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone
    )

def _message_dto(msg: Message) -> MessageDTO:
    return MessageDTO(
        id=msg.id,
        from_username=msg.from_username,
        to_username=msg.to_username,
        body=msg.body,
        sent_at=msg.sent_at,
        read_at=msg.read_at
    )


class UserGateway(UserInterface):
    __slots__ = ("_db_manager", "_password_hasher", "_logger")

    def __init__(
            self,
            db_manager: BaseDatabaseManager,
            password_hasher: PasswordHasher,
            logger: logging.Logger | None = None
    ):
        self._db_manager = db_manager
        self._password_hasher = password_hasher
        self._logger = logger or logging.getLogger(__name__)

    async def register_user(
            self,
            username: str,
            password: str,
            first_name: str | None = None,
            last_name: str | None = None,
            phone: str | None = None
    ) -> UserDTO:
        if not username or not password:
            raise ValidationError("Username and password required")

        hashed_password = await self._password_hasher.hash_async(password)
        now = utcnow()
        try:
            async with self._db_manager.session() as session:
                stmt = insert(User).values(
                    username=username,
                    password=hashed_password,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    join_at=now,
                    last_login_at=now
                ).returning(User)
                result = await session.execute(stmt)
                user = _user_dto(result.scalars().first())
        except IntegrityError as e:
            self._logger.info("Registration rejected, username %s is taken", username)
            raise DuplicateUsernameError(cause=e) from e
        except SQLAlchemyError as e:
            self._logger.error("Error creating user in database: %s", e)
            raise StorageError(cause=e) from e

        self._logger.info("Registered user %s", username)
        return user

    async def authenticate(self, username: str, password: str) -> bool:
        if not username or not password:
            raise ValidationError("Username and password required")

        try:
            async with self._db_manager.session() as session:
                stmt = select(User.password).where(User.username == username)
                result = await session.execute(stmt)
                hashed_password = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self._logger.error("Error getting password hash in database: %s", e)
            raise StorageError(cause=e) from e

        if hashed_password is None:
            self._logger.debug("Authentication failed for %s: unknown user", username)
            return await self._password_hasher.verify_dummy_async(password)

        if await self._password_hasher.verify_async(password, hashed_password):
            return True

        self._logger.debug("Authentication failed for %s: wrong password", username)
        return False

    async def update_login_timestamp(self, username: str) -> datetime:
        if not username:
            raise ValidationError("Username required")

        try:
            async with self._db_manager.session() as session:
                stmt = update(User).where(
                    User.username == username
                ).values(last_login_at=utcnow()).returning(User.last_login_at)
                result = await session.execute(stmt)
                last_login_at = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self._logger.error("Error updating login timestamp in database: %s", e)
            raise StorageError(cause=e) from e

        if last_login_at is None:
            raise NotFoundError(f"No such user: {username}")
        return last_login_at

    async def get_all_users(self) -> list[UserSummaryDTO]:
        try:
            async with self._db_manager.session() as session:
                stmt = select(User.username, User.first_name, User.last_name, User.phone)
                result = await session.execute(stmt)
                return [_summary_dto(row) for row in result.all()]
        except SQLAlchemyError as e:
            self._logger.error("Error getting users in database: %s", e)
            raise StorageError(cause=e) from e

    async def get_user_by_name(self, username: str) -> UserDTO | None:
        try:
            async with self._db_manager.session() as session:
                stmt = select(User).where(User.username == username)
                result = await session.execute(stmt)
                user = result.scalars().first()
                if user:
                    return _user_dto(user)
                else:
                    return None
        except SQLAlchemyError as e:
            self._logger.error("Error getting user by name in database: %s", e)
            raise StorageError(cause=e) from e

    async def get_messages_from(self, username: str) -> list[SentMessageDTO]:
        try:
            async with self._db_manager.session() as session:
                stmt = select(
                    Message.id,
                    Message.body,
                    Message.sent_at,
                    Message.read_at,
                    User.username,
                    User.first_name,
                    User.last_name,
                    User.phone
                ).join(
                    User, User.username == Message.to_username
                ).where(Message.from_username == username)
                result = await session.execute(stmt)

                return [
                    SentMessageDTO(
                        id=row.id,
                        body=row.body,
                        sent_at=row.sent_at,
                        read_at=row.read_at,
                        to_user=_summary_dto(row)
                    ) for row in result.all()
                ]
        except SQLAlchemyError as e:
            self._logger.error("Error getting messages from user in database: %s", e)
            raise StorageError(cause=e) from e

    async def get_messages_to(self, username: str) -> list[ReceivedMessageDTO]:
        try:
            async with self._db_manager.session() as session:
                stmt = select(
                    Message.id,
                    Message.body,
                    Message.sent_at,
                    Message.read_at,
                    User.username,
                    User.first_name,
                    User.last_name,
                    User.phone
                ).join(
                    User, User.username == Message.from_username
                ).where(Message.to_username == username)
                result = await session.execute(stmt)

                return [
                    ReceivedMessageDTO(
                        id=row.id,
                        body=row.body,
                        sent_at=row.sent_at,
                        read_at=row.read_at,
                        from_user=_summary_dto(row)
                    ) for row in result.all()
                ]
        except SQLAlchemyError as e:
            self._logger.error("Error getting messages to user in database: %s", e)
            raise StorageError(cause=e) from e


class MessageGateway(MessageInterface):
    __slots__ = ("_db_manager", "_logger")

    def __init__(self, db_manager: BaseDatabaseManager, logger: logging.Logger | None = None):
        self._db_manager = db_manager
        self._logger = logger or logging.getLogger(__name__)

    async def send_message(self, from_username: str, to_username: str, body: str) -> MessageDTO:
        if not from_username or not to_username:
            raise ValidationError("Sender and recipient required")
        if not body:
            raise ValidationError("Message body required")

        try:
            async with self._db_manager.session() as session:
                stmt = insert(Message).values(
                    from_username=from_username,
                    to_username=to_username,
                    body=body,
                    sent_at=utcnow(),
                    read_at=None
                ).returning(Message)
                result = await session.execute(stmt)
                message = _message_dto(result.scalars().first())
        except IntegrityError as e:
            self._logger.info("Message from %s to %s references an unknown user", from_username, to_username)
            raise InvalidReferenceError(cause=e) from e
        except SQLAlchemyError as e:
            self._logger.error("Error creating message in database: %s", e)
            raise StorageError(cause=e) from e

        return message

    async def get_message_by_id(self, message_id: int) -> MessageDTO | None:
        try:
            async with self._db_manager.session() as session:
                stmt = select(Message).where(Message.id == message_id)
                result = await session.execute(stmt)
                msg = result.scalars().first()

                if msg:
                    return _message_dto(msg)
                return None
        except SQLAlchemyError as e:
            self._logger.error("Error getting message by ID in database: %s", e)
            raise StorageError(cause=e) from e

    async def get_message_detail(self, message_id: int) -> MessageDetailDTO | None:
        sender = aliased(User)
        recipient = aliased(User)
        try:
            async with self._db_manager.session() as session:
                stmt = select(Message, sender, recipient).join(
                    sender, sender.username == Message.from_username
                ).join(
                    recipient, recipient.username == Message.to_username
                ).where(Message.id == message_id)
                result = await session.execute(stmt)
                row = result.first()
        except SQLAlchemyError as e:
            self._logger.error("Error getting message detail in database: %s", e)
            raise StorageError(cause=e) from e

        if row is None:
            return None

        msg, from_user, to_user = row
        return MessageDetailDTO(
            id=msg.id,
            body=msg.body,
            sent_at=msg.sent_at,
            read_at=msg.read_at,
            from_user=_summary_dto(from_user),
            to_user=_summary_dto(to_user)
        )

    async def mark_as_read(self, message_id: int, reader_username: str) -> MessageDTO:
        """
        Only the recipient may mark a message read. Marking an already read
        message again succeeds and keeps the first read_at.
        """
        try:
            async with self._db_manager.session() as session:
                stmt = select(Message).where(Message.id == message_id).with_for_update()
                result = await session.execute(stmt)
                msg = result.scalars().first()

                if msg is None:
                    raise NotFoundError(f"No such message: {message_id}")
                if msg.to_username != reader_username:
                    raise ForbiddenError("Only the recipient can mark a message as read")

                if msg.read_at is None:
                    msg.read_at = utcnow()
                    await session.flush()
                    await session.refresh(msg)
                return _message_dto(msg)
        except SQLAlchemyError as e:
            self._logger.error("Error marking message read in database: %s", e)
            raise StorageError(cause=e) from e
