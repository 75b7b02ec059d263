# tests/fake_engine.py
from voice_session.EngineEventEmitter import EngineEventEmitter
from voice_session.errors import EngineStateError
from voice_session.types import EVENT_ENDED, EVENT_ERROR, EVENT_RESULT, EVENT_STARTED, ResultSegment


class FakeRecognitionEngine(EngineEventEmitter):
    """In-memory RecognitionEngine driven by the test.

    start()/stop() only record the request, like a real asynchronous engine;
    the test decides when 'started' and 'ended' are delivered.
    """

    def __init__(self):
        super().__init__()
        self.running = False
        self.configure_calls = []
        self.start_calls = 0
        self.stop_calls = 0
        self.fail_stop_with = None

    def configure(self, language, continuous, interim_results, max_alternatives):
        self.configure_calls.append((language, continuous, interim_results, max_alternatives))

    def start(self):
        if self.running:
            raise EngineStateError("recognition already started")
        self.start_calls += 1
        self.running = True

    def stop(self):
        if self.fail_stop_with is not None:
            raise self.fail_stop_with
        if not self.running:
            raise EngineStateError("recognition not started")
        self.stop_calls += 1

    # Event helpers

    def fire_started(self):
        self.running = True
        self.emit(EVENT_STARTED)

    def fire_result(self, *segments):
        self.emit(EVENT_RESULT, [ResultSegment(text, is_final) for text, is_final in segments])

    def fire_ended(self):
        self.running = False
        self.emit(EVENT_ENDED)

    def fire_error(self, code):
        self.emit(EVENT_ERROR, code)


class EngineFactory:
    """Engine factory that remembers every engine it created."""

    def __init__(self):
        self.engines = []

    def __call__(self):
        engine = FakeRecognitionEngine()
        self.engines.append(engine)
        return engine

    @property
    def engine(self):
        return self.engines[-1]
