import pytest

from container_identity.identity import clear_cache


@pytest.fixture(autouse=True)
def clear_identity_cache() -> None:
    clear_cache()
