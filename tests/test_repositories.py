"""Tests for the user, account and transaction repositories."""
import pytest
from unittest.mock import AsyncMock
from bson import ObjectId

from app.core.exceptions import (
    AccountExists,
    AccountNotFound,
    DataIntegrityError,
    IdentityConflict,
    InvalidAccount,
    TransactionNotFound,
    UserAlreadyExists,
    UserNotFound,
)
from app.repositories.account_repo import AccountRepository
from app.repositories.transaction_repo import TransactionRepository
from app.repositories.user_repo import UserRepository


@pytest.mark.asyncio
class TestUserRepository:
    """Test UserRepository identity operations."""

    async def test_create_user_success(self, test_db):
        user_repo = UserRepository(test_db)

        user = await user_repo.create_user("telegram", "100", "SomeOne")

        assert user.id is not None
        assert user.platform_ids == {"telegram": "100"}
        assert user.platform_usernames == {"telegram": "someone"}
        assert user.created_at is not None

    async def test_create_user_duplicate_platform_id(self, test_db, multiple_users):
        user_repo = UserRepository(test_db)

        with pytest.raises(UserAlreadyExists):
            await user_repo.create_user("telegram", "1", "impostor")

    async def test_unique_index_reports_identity_conflict(self, test_db, multiple_users):
        """A registration that slips past the lookup hits the unique index."""
        user_repo = UserRepository(test_db)

        user_repo.collection.find_one = AsyncMock(return_value=None)

        with pytest.raises(IdentityConflict):
            await user_repo.create_user("telegram", "1", "impostor")

    async def test_resolve_or_register_is_idempotent(self, test_db):
        user_repo = UserRepository(test_db)

        first = await user_repo.resolve_or_register("telegram", "7", "dana")
        second = await user_repo.resolve_or_register("telegram", "7", "dana")

        assert first.id == second.id
        assert len(await user_repo.list_users()) == 1

    async def test_get_user_by_username_is_case_insensitive(self, test_db, multiple_users):
        user_repo = UserRepository(test_db)

        user = await user_repo.get_user_by_username("telegram", "BOB")

        assert user.id == multiple_users[1].id

    async def test_get_user_by_username_not_found(self, test_db, multiple_users):
        user_repo = UserRepository(test_db)

        with pytest.raises(UserNotFound):
            await user_repo.get_user_by_username("telegram", "nobody")

    async def test_get_user_by_id(self, test_db, multiple_users):
        user_repo = UserRepository(test_db)

        user = await user_repo.get_user_by_id(str(multiple_users[0].id))

        assert user.platform_usernames["telegram"] == "alice"

    async def test_get_user_by_id_invalid_id(self, test_db):
        user_repo = UserRepository(test_db)

        with pytest.raises(UserNotFound):
            await user_repo.get_user_by_id("invalid_id")

    async def test_list_users_in_registration_order(self, test_db, multiple_users):
        user_repo = UserRepository(test_db)

        users = await user_repo.list_users()

        assert [u.id for u in users] == [u.id for u in multiple_users]


@pytest.mark.asyncio
class TestAccountRepository:
    """Test the pairwise account registry."""

    async def test_find_between_is_symmetric(self, test_db, multiple_users):
        alice, bob, _ = multiple_users
        repo = AccountRepository(test_db)
        created = await repo.create_account(alice.id, bob.id, 5)

        forward = await repo.find_between(alice.id, bob.id)
        backward = await repo.find_between(bob.id, alice.id)

        assert forward.id == backward.id == created.id
        assert forward.creator_id == alice.id
        assert forward.balance == 5

    async def test_find_between_missing_pair(self, test_db, multiple_users):
        alice, bob, _ = multiple_users
        repo = AccountRepository(test_db)

        with pytest.raises(AccountNotFound):
            await repo.find_between(alice.id, bob.id)

    async def test_create_existing_pair_fails_in_either_order(self, test_db, multiple_users):
        alice, bob, _ = multiple_users
        repo = AccountRepository(test_db)
        created = await repo.create_account(alice.id, bob.id)

        with pytest.raises(AccountExists) as exc_info:
            await repo.create_account(bob.id, alice.id)

        assert exc_info.value.existing.id == created.id

    async def test_create_self_account_is_invalid(self, test_db, multiple_users):
        alice = multiple_users[0]
        repo = AccountRepository(test_db)

        with pytest.raises(InvalidAccount):
            await repo.create_account(alice.id, alice.id)

    async def test_create_without_subject_is_invalid(self, test_db, multiple_users):
        repo = AccountRepository(test_db)

        with pytest.raises(InvalidAccount):
            await repo.create_account(multiple_users[0].id, None)

    async def test_ensure_account_reports_whether_it_created(self, test_db, multiple_users):
        alice, bob, _ = multiple_users
        repo = AccountRepository(test_db)

        first = await repo.ensure_account(alice.id, bob.id, 3)
        second = await repo.ensure_account(bob.id, alice.id, 9)

        assert first.created is True
        assert second.created is False
        assert second.account.id == first.account.id
        # the losing opening balance is not applied
        assert second.account.balance == 3

    async def test_duplicate_accounts_are_an_integrity_error(self, test_db, multiple_users):
        alice, bob, _ = multiple_users
        repo = AccountRepository(test_db)
        # bypass the pair_key index the way a legacy import could
        await repo.collection.insert_many([
            {"_id": ObjectId(), "creator_id": alice.id, "subject_id": bob.id, "pair_key": "legacy-1", "balance": 1.0},
            {"_id": ObjectId(), "creator_id": bob.id, "subject_id": alice.id, "pair_key": "legacy-2", "balance": 2.0},
        ])

        with pytest.raises(DataIntegrityError):
            await repo.find_between(alice.id, bob.id)

    async def test_find_all_for_user(self, test_db, multiple_users):
        alice, bob, charlie = multiple_users
        repo = AccountRepository(test_db)
        await repo.create_account(alice.id, bob.id)
        await repo.create_account(charlie.id, alice.id)
        await repo.create_account(bob.id, charlie.id)

        accounts = await repo.find_all_for(alice.id)

        assert len(accounts) == 2
        assert all(account.involves(alice.id) for account in accounts)

    async def test_increment_balance(self, test_db, multiple_users):
        alice, bob, _ = multiple_users
        repo = AccountRepository(test_db)
        account = await repo.create_account(alice.id, bob.id, 10)

        updated = await repo.increment_balance(account, -2.5)

        assert updated.balance == 7.5
        assert (await repo.get_account(account.id)).balance == 7.5

    async def test_get_account_not_found(self, test_db):
        repo = AccountRepository(test_db)

        with pytest.raises(AccountNotFound):
            await repo.get_account(str(ObjectId()))


@pytest.mark.asyncio
class TestTransactionRepository:
    """Test the append-only ledger."""

    async def test_append_and_get(self, test_db, multiple_users):
        alice, bob, charlie = multiple_users
        repo = TransactionRepository(test_db)

        appended = await repo.append(alice.id, [bob.id, charlie.id], 10, 5)
        fetched = await repo.get_transaction(str(appended.id))

        assert fetched.created_by == alice.id
        assert fetched.participants == [bob.id, charlie.id]
        assert fetched.amount == 10
        assert fetched.share == 5

    async def test_get_missing_transaction(self, test_db):
        repo = TransactionRepository(test_db)

        with pytest.raises(TransactionNotFound):
            await repo.get_transaction("not-an-id")

    async def test_history_newest_first(self, test_db, multiple_users):
        alice, bob, _ = multiple_users
        repo = TransactionRepository(test_db)
        first = await repo.append(alice.id, [bob.id], 1, 1)
        second = await repo.append(bob.id, [alice.id], 2, 2)
        third = await repo.append(alice.id, [bob.id], 3, 3)

        history = await repo.history(alice.id)

        assert [t.id for t in history] == [third.id, second.id, first.id]

    async def test_history_filter_is_a_subset(self, test_db, multiple_users):
        alice, bob, charlie = multiple_users
        repo = TransactionRepository(test_db)
        await repo.append(alice.id, [bob.id], 4, 4)
        await repo.append(alice.id, [charlie.id], 6, 6)
        await repo.append(charlie.id, [bob.id], 8, 8)
        await repo.append(bob.id, [alice.id, charlie.id], 10, 3)

        everything = await repo.history(alice.id)
        with_charlie = await repo.history(alice.id, charlie.id)

        assert len(everything) == 3
        assert {t.id for t in with_charlie} <= {t.id for t in everything}
        assert len(with_charlie) == 2
        for transaction in with_charlie:
            assert transaction.involves(alice.id)
            assert transaction.involves(charlie.id)
