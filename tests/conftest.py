# tests/conftest.py
import pytest
from unittest.mock import Mock

from tests.fake_engine import EngineFactory
from voice_session.SessionController import SessionController
from voice_session.types import SessionConfig


@pytest.fixture
def engine_factory():
    """Factory creating FakeRecognitionEngine instances on demand."""
    return EngineFactory()


@pytest.fixture
def callbacks():
    """Mock consumer callbacks keyed by SessionConfig field name."""
    return {
        'on_final_result': Mock(),
        'on_interim_result': Mock(),
        'on_ended': Mock(),
        'on_error': Mock(),
    }


@pytest.fixture
def controller(engine_factory, callbacks):
    """Controller bound to a fake engine with pt-PT defaults and mock callbacks."""
    config = SessionConfig().with_callbacks(**callbacks)
    session = SessionController(config, engine_factory=engine_factory)
    yield session
    session.dispose()


@pytest.fixture
def engine(controller, engine_factory):
    """The fake engine currently bound to the controller fixture."""
    return engine_factory.engine
