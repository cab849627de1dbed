"""Pytest configuration and shared fixtures."""
import pytest

import memberaccess.config as config_module
import memberaccess.registry as registry_module
from memberaccess import clear_resolution_cache

from sample_hierarchy import ParentClass, SubClassA, SubClassB


@pytest.fixture(autouse=True)
def reset_member_access_state():
    """Start every test with empty caches, no registrations and default config."""
    original_cache_enabled = config_module._resolution_cache_enabled
    original_registry = {owner: dict(members) for owner, members in registry_module._registered_members.items()}
    clear_resolution_cache()

    yield

    config_module._resolution_cache_enabled = original_cache_enabled
    registry_module._registered_members.clear()
    registry_module._registered_members.update(original_registry)
    clear_resolution_cache()


@pytest.fixture
def parent():
    return ParentClass()


@pytest.fixture
def sub_a():
    return SubClassA()


@pytest.fixture
def sub_b():
    return SubClassB()
