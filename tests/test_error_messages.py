"""Tests for ErrorMessages (engine error code -> localized message)."""

import pytest

from voice_session.ErrorMessages import describe_error, is_silent_error, message_language


@pytest.mark.parametrize("code,expected", [
    ('no-speech', 'Nenhuma fala detectada'),
    ('audio-capture', 'Microfone não encontrado'),
    ('not-allowed', 'Permissão do microfone negada'),
    ('network', 'Erro de conexão'),
])
def test_portuguese_messages(code, expected):
    assert describe_error(code, 'pt-PT') == expected


@pytest.mark.parametrize("code,expected", [
    ('no-speech', 'No speech detected'),
    ('audio-capture', 'Microphone not found'),
    ('not-allowed', 'Microphone permission denied'),
    ('network', 'Connection error'),
])
def test_english_messages(code, expected):
    assert describe_error(code, 'en-US') == expected


def test_unknown_code_embeds_raw_code():
    assert describe_error('language-not-supported', 'pt-PT') == 'Erro: language-not-supported'
    assert describe_error('bad-grammar', 'en-GB') == 'Error: bad-grammar'


def test_fallback_key_is_not_a_code():
    assert describe_error('fallback', 'pt-PT') == 'Erro: fallback'


def test_default_locale_is_portuguese():
    assert describe_error('network') == 'Erro de conexão'


@pytest.mark.parametrize("locale,language", [
    ('pt-PT', 'pt'),
    ('pt-BR', 'pt'),
    ('en_US', 'en'),
    ('EN', 'en'),
    ('de-DE', 'pt'),
])
def test_message_language(locale, language):
    assert message_language(locale) == language


def test_only_aborted_is_silent():
    assert is_silent_error('aborted') is True
    for code in ('no-speech', 'audio-capture', 'not-allowed', 'network', 'other'):
        assert is_silent_error(code) is False
