# voice_session/engines/__init__.py
from .RemoteRecognitionEngine import RemoteRecognitionEngine
from .WsEngineTransport import WsEngineTransport

__all__ = [
    'RemoteRecognitionEngine',
    'WsEngineTransport'
]
