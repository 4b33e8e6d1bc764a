import pytest
from unittest.mock import AsyncMock, patch
from bson import ObjectId

from app.core.exceptions import UserAlreadyExists, UserNotFound
from app.services.identity_service import IdentityService


@pytest.mark.asyncio
async def test_resolve_or_register_caches_result(test_db, user_cache):
    service = IdentityService(test_db, user_cache)

    user = await service.resolve_or_register("telegram", "55", "Erin")

    assert user_cache.get_by_platform("telegram", "55") is user
    assert user_cache.get_by_id(user.id) is user

    with patch.object(service.users, "resolve_or_register", AsyncMock()) as repo_call:
        again = await service.resolve_or_register("telegram", "55", "Erin")

    repo_call.assert_not_called()
    assert again.id == user.id


@pytest.mark.asyncio
async def test_find_by_platform_id_miss_is_not_cached(test_db, user_cache):
    service = IdentityService(test_db, user_cache)

    with pytest.raises(UserNotFound):
        await service.find_by_platform_id("telegram", "404")

    assert len(user_cache) == 0
    user = await service.resolve_or_register("telegram", "404", "late")
    assert (await service.find_by_platform_id("telegram", "404")).id == user.id


@pytest.mark.asyncio
async def test_register_rejects_known_identity(test_db, user_cache, multiple_users):
    service = IdentityService(test_db, user_cache)

    with pytest.raises(UserAlreadyExists):
        await service.register("telegram", "1", "alice")


@pytest.mark.asyncio
async def test_get_user_served_from_cache(test_db, user_cache, multiple_users):
    service = IdentityService(test_db, user_cache)
    alice = multiple_users[0]

    first = await service.get_user(alice.id)
    with patch.object(service.users, "get_user_by_id", AsyncMock()) as repo_call:
        second = await service.get_user(str(alice.id))

    repo_call.assert_not_called()
    assert first.id == second.id == alice.id


@pytest.mark.asyncio
async def test_display_names_skips_unknown_users(test_db, user_cache, multiple_users):
    service = IdentityService(test_db, user_cache)
    alice, bob, _ = multiple_users
    ghost = ObjectId()

    names = await service.display_names([alice.id, bob.id, ghost, alice.id], "telegram")

    assert names == {str(alice.id): "alice", str(bob.id): "bob"}
