# voice_session/__init__.py
from .SessionController import SessionController
from .SessionStateStore import SessionStateStore
from .TranscriptForwarder import TranscriptForwarder
from .types import ResultSegment, SessionConfig, SessionState
from .errors import EngineStateError, EngineUnavailableError

__all__ = [
    'SessionController',
    'SessionStateStore',
    'TranscriptForwarder',
    'ResultSegment',
    'SessionConfig',
    'SessionState',
    'EngineStateError',
    'EngineUnavailableError'
]
