import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI runs configure structlog against a captured stderr; undo that."""
    yield
    structlog.reset_defaults()
