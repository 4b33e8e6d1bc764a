import logging
from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.core.exceptions import (
    IdentityConflict,
    InvalidInput,
    LedgerError,
    SelfTransaction,
    UserNotFound,
    ZeroBalance,
)
from app.models.message import InboundMessage
from app.models.user import User
from app.repositories.user_cache import UserCache
from app.services import presenter
from app.services.balance_service import BalanceService
from app.services.identity_service import IdentityService

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Hello! I've created you an account. If you need help, "
    "or want to know how to use this bot, run /help!"
)
FAILED_TRANSACTION_TEXT = "Failed to create transaction, please try again later"


def parse_command(text: str) -> List[str]:
    """Split a chat message into tokens; the command loses its "/" and "@botname"."""
    tokens = text.split()
    if tokens:
        tokens[0] = tokens[0].lstrip("/").split("@", 1)[0].lower()
    return tokens


class CommandService:
    """Turns inbound chat messages into ledger operations and reply text."""

    def __init__(self, db: AsyncIOMotorDatabase, cache: UserCache, currency: Optional[str] = None):
        self.identity = IdentityService(db, cache)
        self.balances = BalanceService(db)
        self.currency = currency or settings.CURRENCY_SYMBOL

    async def resolve_sender(self, message: InboundMessage) -> InboundMessage:
        """Attach the known ledger user to the message, if there is one."""
        if message.sender is None:
            try:
                message.sender = await self.identity.find_by_platform_id(
                    message.platform, message.platform_user_id
                )
            except UserNotFound:
                logger.info("Unknown sender %s:%s", message.platform, message.platform_user_id)
        return message

    async def handle(self, message: InboundMessage) -> str:
        logger.info("Got message from %s: %s", message.username, message.text)

        if message.sender is None:
            return await self.handle_new_user(message)

        tokens = parse_command(message.text)
        if not tokens:
            return ""

        command = tokens[0]
        if command in ("help", "start"):
            return presenter.HELP_TEXT
        if command == "list":
            return await self.handle_list_users(message)
        if command == "history":
            return await self.handle_history(message, tokens[1:])
        if command == "add":
            return await self.handle_add(message, tokens[1:])
        if command == "status":
            return await self.handle_balance(message)
        return f"Unknown command '{message.text}'"

    async def handle_new_user(self, message: InboundMessage) -> str:
        try:
            message.sender = await self.identity.resolve_or_register(
                message.platform, message.platform_user_id, message.username
            )
        except IdentityConflict:
            # another message registered this identity first; it got the welcome
            logger.info("Sender %s:%s registered concurrently", message.platform, message.platform_user_id)
            message.sender = await self.identity.find_by_platform_id(
                message.platform, message.platform_user_id
            )
            return await self.handle(message)
        return WELCOME_TEXT

    async def handle_add(self, message: InboundMessage, args: List[str]) -> str:
        amount = 0
        users: List[User] = []
        for token in args:
            try:
                amount = int(token)
                continue
            except ValueError:
                pass

            try:
                users.append(await self.identity.find_by_username(message.platform, token))
            except UserNotFound:
                return f"Failed to find user {token}"

        if amount == 0:
            return "Balance cannot be 0"
        if not users:
            return "Usage: /add USERNAME... BALANCE"

        try:
            await self.balances.record_expense(message.sender.id, [user.id for user in users], amount)
        except ZeroBalance:
            return "Balance cannot be 0"
        except SelfTransaction:
            return "Cannot create a balance with yourself"
        except InvalidInput as exc:
            return str(exc)
        except (LedgerError, PyMongoError):
            logger.exception("Failed to create transaction for %s", message.sender.id)
            return FAILED_TRANSACTION_TEXT

        return "Balance Created"

    async def handle_balance(self, message: InboundMessage) -> str:
        accounts = await self.balances.accounts_for(message.sender.id)
        counterparties = [account.counterparty_of(message.sender.id) for account in accounts]
        names = await self.identity.display_names(counterparties, message.platform)
        return presenter.summarize(message.sender.id, accounts, names, self.currency)

    async def handle_history(self, message: InboundMessage, args: List[str]) -> str:
        filter_user = None
        if args:
            try:
                filter_user = await self.identity.find_by_username(message.platform, args[0])
            except UserNotFound:
                return f"Failed to find user {args[0]}"

        filter_id = filter_user.id if filter_user else None
        transactions = await self.balances.history(message.sender.id, filter_id)

        ids = {message.sender.id}
        if filter_id is not None:
            ids.add(filter_id)
        for transaction in transactions:
            ids.add(transaction.created_by)
            ids.update(transaction.participants)
        names = await self.identity.display_names(ids, message.platform)

        return presenter.render_history(
            message.sender.id, transactions, names, filter_id, self.currency
        )

    async def handle_list_users(self, message: InboundMessage) -> str:
        users = await self.identity.list_users()
        return presenter.render_user_list(users, message.platform)
