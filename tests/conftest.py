"""Pytest configuration for the linguatree test suite.

Single Source of Truth for Hypothesis max_examples:
- dev: Local development with 500 examples (thorough property testing)
- ci: CI runs with 50 examples (fast feedback)
- verbose: Debug mode with progress output (100 examples)

Profile auto-detection:
- CI=true environment variable -> "ci" profile
- HYPOTHESIS_PROFILE env var -> explicit override
- Otherwise -> "dev" profile (local development)

Override manually: HYPOTHESIS_PROFILE=verbose pytest tests/
"""

from __future__ import annotations

import os
from typing import Any

import pytest
from hypothesis import HealthCheck, Phase, Verbosity, settings

from linguatree import I18n, ResourceStore
from linguatree.runtime.plural_rules import get_default_engine

# =============================================================================
# HYPOTHESIS PROFILES - SINGLE SOURCE OF TRUTH
# =============================================================================

# Fixtures like caplog are reused across examples; that is intended here.
_SUPPRESSED = [HealthCheck.function_scoped_fixture]

settings.register_profile(
    "dev",
    max_examples=500,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    suppress_health_check=_SUPPRESSED,
)

settings.register_profile(
    "ci",
    max_examples=50,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=True,
    print_blob=True,
    suppress_health_check=_SUPPRESSED,
)

settings.register_profile(
    "verbose",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    verbosity=Verbosity.verbose,
    suppress_health_check=_SUPPRESSED,
)


# =============================================================================
# AUTO-DETECT EXECUTION CONTEXT
# =============================================================================


def _detect_profile() -> str:
    """Detect appropriate Hypothesis profile based on execution context.

    Priority:
    1. HYPOTHESIS_PROFILE env var (explicit override)
    2. CI=true env var
    3. Default to "dev" (local development)
    """
    explicit = os.environ.get("HYPOTHESIS_PROFILE")
    if explicit in ("dev", "ci", "verbose"):
        return explicit

    if os.environ.get("CI") == "true":
        return "ci"

    return "dev"


settings.load_profile(_detect_profile())


# =============================================================================
# SHARED FIXTURES
# =============================================================================

EN_RESOURCES: dict[str, Any] = {
    "greeting": "Hello, ${name}",
    "menu": {
        "title": "Menu",
        "cart": "${pluralize(count, ['item', 'items'])} in cart",
    },
    "steps": ["Open", "Pay ${amount}"],
}

RU_RESOURCES: dict[str, Any] = {
    "greeting": "Привет, ${name}",
    "menu": {
        "cart": "${pluralize(count, ['товар', 'товара', 'товаров'])}",
    },
}


@pytest.fixture(autouse=True)
def _reset_default_plural_engine() -> None:
    """Keep one-time plural warnings independent between tests."""
    get_default_engine().reset_warnings()


@pytest.fixture
def store() -> ResourceStore:
    """Empty resource store with default limits."""
    return ResourceStore()


@pytest.fixture
def i18n() -> I18n:
    """I18n facade with English and Russian resources loaded."""
    instance = I18n(default_language="en")
    instance.load_resource("en", EN_RESOURCES)
    instance.load_resource("ru", RU_RESOURCES)
    return instance


@pytest.fixture
def loaded_store(store: ResourceStore) -> ResourceStore:
    """Store with English and Russian resources loaded."""
    store.load_resource("en", EN_RESOURCES)
    store.load_resource("ru", RU_RESOURCES)
    return store
