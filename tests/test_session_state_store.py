"""
Tests for SessionStateStore - session snapshot holder with observer pattern.
"""
import dataclasses
import unittest
from unittest.mock import Mock

from voice_session.SessionStateStore import SessionStateStore
from voice_session.types import SessionState


class TestSessionStateStore(unittest.TestCase):
    """Test SessionStateStore snapshots and observer notification."""

    def setUp(self):
        self.store = SessionStateStore()

    def test_initial_state_is_default_snapshot(self):
        self.assertEqual(self.store.get_state(), SessionState())

    def test_initial_snapshot_can_be_supplied(self):
        store = SessionStateStore(SessionState(is_supported=True))
        self.assertTrue(store.get_state().is_supported)

    def test_update_replaces_snapshot(self):
        before = self.store.get_state()

        after = self.store.update(transcript="olá", is_listening=True)

        self.assertIsNot(before, after)
        self.assertEqual(before.transcript, '')
        self.assertEqual(self.store.get_state().transcript, "olá")
        self.assertTrue(self.store.get_state().is_listening)

    def test_observers_receive_old_and_new_state(self):
        observer = Mock()
        self.store.subscribe(observer)

        self.store.update(error="Erro de conexão")

        old_state, new_state = observer.call_args[0]
        self.assertIsNone(old_state.error)
        self.assertEqual(new_state.error, "Erro de conexão")

    def test_unchanged_update_does_not_notify(self):
        observer = Mock()
        self.store.subscribe(observer)

        self.store.update(transcript='', error=None)

        observer.assert_not_called()

    def test_unknown_field_rejected(self):
        with self.assertRaises(ValueError):
            self.store.update(listening=True)

    def test_dispose_removes_observer(self):
        observer = Mock()
        dispose = self.store.subscribe(observer)

        dispose()
        dispose()
        self.store.update(is_listening=True)

        observer.assert_not_called()
        self.assertEqual(self.store.observer_count(), 0)

    def test_failing_observer_does_not_block_others(self):
        failing = Mock(side_effect=RuntimeError("observer crashed"))
        healthy = Mock()
        self.store.subscribe(failing)
        self.store.subscribe(healthy)

        with self.assertLogs(level='ERROR'):
            self.store.update(is_listening=True)

        healthy.assert_called_once()

    def test_update_from_observer_delivered_after_current_round(self):
        calls = []

        def resetting(old_state, new_state):
            calls.append(('resetting', new_state.transcript))
            if new_state.transcript:
                self.store.update(transcript='')

        def recording(old_state, new_state):
            calls.append(('recording', old_state.transcript, new_state.transcript))

        self.store.subscribe(resetting)
        self.store.subscribe(recording)

        self.store.update(transcript="olá")

        self.assertEqual(calls, [
            ('resetting', "olá"),
            ('recording', '', "olá"),
            ('resetting', ''),
            ('recording', "olá", ''),
        ])
        self.assertEqual(self.store.get_state().transcript, '')

    def test_failing_observer_does_not_block_later_updates(self):
        self.store.subscribe(Mock(side_effect=RuntimeError("observer crashed")))
        observer = Mock()
        self.store.subscribe(observer)

        with self.assertLogs(level='ERROR'):
            self.store.update(is_listening=True)
            self.store.update(is_listening=False)

        self.assertEqual(observer.call_count, 2)

    def test_snapshots_are_immutable(self):
        state = self.store.get_state()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            state.transcript = "changed"


if __name__ == '__main__':
    unittest.main()
