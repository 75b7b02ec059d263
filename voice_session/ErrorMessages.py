"""Maps recognition engine error codes to localized, user-facing messages.

Error Taxonomy:
- no-speech: recoverable, nothing was heard
- audio-capture: no usable microphone
- not-allowed: microphone permission denied
- network: transient connectivity failure
- aborted: caller stopped recognition, never surfaced
- anything else: unknown, surfaced with the raw code embedded
"""
from typing import Dict

NO_SPEECH = 'no-speech'
AUDIO_CAPTURE = 'audio-capture'
NOT_ALLOWED = 'not-allowed'
NETWORK = 'network'
ABORTED = 'aborted'

DEFAULT_MESSAGE_LANGUAGE = 'pt'

# Fallback messages use str.format with the raw engine code
_MESSAGES: Dict[str, Dict[str, str]] = {
    'pt': {
        NO_SPEECH: 'Nenhuma fala detectada',
        AUDIO_CAPTURE: 'Microfone não encontrado',
        NOT_ALLOWED: 'Permissão do microfone negada',
        NETWORK: 'Erro de conexão',
        'fallback': 'Erro: {code}',
    },
    'en': {
        NO_SPEECH: 'No speech detected',
        AUDIO_CAPTURE: 'Microphone not found',
        NOT_ALLOWED: 'Microphone permission denied',
        NETWORK: 'Connection error',
        'fallback': 'Error: {code}',
    },
}


def is_silent_error(code: str) -> bool:
    """True for codes signalling caller-initiated cancellation rather than a failure."""
    return code == ABORTED


def message_language(locale: str) -> str:
    """Select the message table for a locale such as 'pt-PT' or 'en_US'.

    Unknown languages fall back to Portuguese.
    """
    language = locale.replace('_', '-').split('-', 1)[0].lower()
    if language in _MESSAGES:
        return language
    return DEFAULT_MESSAGE_LANGUAGE


def describe_error(code: str, locale: str = 'pt-PT') -> str:
    """Return the localized message for an engine error code.

    Args:
        code: Engine error code (e.g. 'not-allowed')
        locale: Session locale used to pick the message language

    Returns:
        Human-readable message; unknown codes embed the raw code
    """
    messages = _MESSAGES[message_language(locale)]
    if code in messages and code != 'fallback':
        return messages[code]
    return messages['fallback'].format(code=code)
