import pytest

from messagely.core.errors import ValidationError
from messagely.core.security import PasswordHasher


def test_hash_is_not_plaintext(password_hasher):
    hashed = password_hasher.hash("hunter2")
    assert hashed != "hunter2"
    assert hashed.startswith("$2")


def test_hash_is_salted(password_hasher):
    assert password_hasher.hash("hunter2") != password_hasher.hash("hunter2")


def test_hash_embeds_work_factor(password_hasher):
    assert password_hasher.hash("hunter2").split("$")[2] == "04"


def test_verify_matching_and_mismatching(password_hasher):
    hashed = password_hasher.hash("hunter2")
    assert password_hasher.verify("hunter2", hashed) is True
    assert password_hasher.verify("wrong", hashed) is False


def test_hash_from_other_work_factor_still_verifies(password_hasher):
    older = PasswordHasher(work_factor=5).hash("hunter2")
    assert password_hasher.verify("hunter2", older) is True


def test_verify_malformed_hash_raises(password_hasher):
    with pytest.raises(ValidationError):
        password_hasher.verify("hunter2", "not-a-bcrypt-hash")


def test_empty_password_rejected(password_hasher):
    with pytest.raises(ValidationError):
        password_hasher.hash("")


def test_verify_dummy_is_always_false(password_hasher):
    assert password_hasher.verify_dummy("hunter2") is False


@pytest.mark.asyncio
async def test_async_wrappers(password_hasher):
    hashed = await password_hasher.hash_async("hunter2")
    assert await password_hasher.verify_async("hunter2", hashed) is True
    assert await password_hasher.verify_async("nope", hashed) is False


def test_only_first_72_bytes_are_significant(password_hasher):
    prefix = "a" * 72
    hashed = password_hasher.hash(prefix + "first-suffix")

    assert password_hasher.verify(prefix + "other-suffix", hashed) is True
    assert password_hasher.verify(prefix, hashed) is True
    assert password_hasher.verify("a" * 71 + "b", hashed) is False
