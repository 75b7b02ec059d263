"""Type definitions for recognition sessions: engine events, segments, state and configuration."""

from dataclasses import dataclass, replace
from typing import Callable, Literal, Optional

# Engine event names
EVENT_STARTED = 'started'
EVENT_RESULT = 'result'
EVENT_ENDED = 'ended'
EVENT_ERROR = 'error'

ENGINE_EVENTS = frozenset({EVENT_STARTED, EVENT_RESULT, EVENT_ENDED, EVENT_ERROR})

EngineEvent = Literal['started', 'result', 'ended', 'error']

DEFAULT_LANGUAGE = 'pt-PT'


@dataclass(frozen=True)
class ResultSegment:
    """One chunk of recognized speech emitted by the engine.

    Attributes:
        text: Top hypothesis text for this segment
        is_final: True when the engine will not revise this segment any more
    """
    text: str
    is_final: bool = False


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a recognition session as seen by the UI layer.

    Snapshots are immutable; SessionStateStore replaces the whole object on
    every change so observers can compare old and new states safely.

    Attributes:
        is_listening: True between engine 'started' and 'ended'/fatal 'error'
        is_supported: False when the host provides no recognition engine
        transcript: Concatenation of every final segment since the last reset
        interim_transcript: Interim text of the latest result event
        error: Localized message of the last surfaced engine error
    """
    is_listening: bool = False
    is_supported: bool = False
    transcript: str = ''
    interim_transcript: str = ''
    error: Optional[str] = None


@dataclass(frozen=True)
class SessionConfig:
    """Per-controller configuration, fixed for the lifetime of an engine binding.

    Attributes:
        language: BCP-47 locale passed to the engine (e.g. 'pt-PT')
        continuous: Keep listening after a final result instead of stopping
        on_final_result: Called with the full transcript after final text arrives
        on_interim_result: Called with the latest interim text
        on_ended: Called when the engine ends the session
        on_error: Called with the localized message of a surfaced error
    """
    language: str = DEFAULT_LANGUAGE
    continuous: bool = True
    on_final_result: Optional[Callable[[str], None]] = None
    on_interim_result: Optional[Callable[[str], None]] = None
    on_ended: Optional[Callable[[], None]] = None
    on_error: Optional[Callable[[str], None]] = None

    def __post_init__(self):
        if not isinstance(self.language, str) or not self.language.strip():
            raise ValueError(f"language must be a non-empty string, got {self.language!r}")

    def with_callbacks(self, **callbacks: Optional[Callable]) -> 'SessionConfig':
        """Return a copy with the given on_* callbacks attached."""
        unknown = [name for name in callbacks if not name.startswith('on_')]
        if unknown:
            raise ValueError(f"Unknown callbacks: {', '.join(sorted(unknown))}")
        return replace(self, **callbacks)

    def engine_settings(self) -> tuple:
        """Settings that require rebinding the engine when they change."""
        return (self.language, self.continuous)
