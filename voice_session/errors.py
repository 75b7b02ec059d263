"""Exceptions raised by recognition engines and engine factories."""


class EngineUnavailableError(Exception):
    """Raised by an engine factory when the host has no recognition capability."""


class EngineStateError(RuntimeError):
    """Raised by an engine when start() is called while running or stop() while idle."""
