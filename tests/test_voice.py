"""
Tests for the voice utterance matcher, the listen loop and the voice pipeline.
"""

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from handsfree.core.dispatcher import CommandDispatcher
from handsfree.core.pipeline import VoicePipeline
from handsfree.core.voice import (
    LISTENING_PROMPT,
    ListenerLoop,
    ListenerState,
    VoiceState,
    VoiceUtteranceMatcher,
    find_wake_phrase,
    strip_fillers,
)
from handsfree.utils.config import Config
from tests.fixtures import RecordingSink


class TestTextHelpers(unittest.TestCase):

    def test_find_wake_phrase(self):
        self.assertEqual(find_wake_phrase("ok hey bank balance"), "hey bank")
        self.assertEqual(find_wake_phrase("hello banking help"), "hello banking")
        self.assertEqual(find_wake_phrase("hey banking"), "hey banking")
        self.assertIsNone(find_wake_phrase("balance please"))

    def test_strip_fillers(self):
        self.assertEqual(strip_fillers("please check balance"), "check balance")
        self.assertEqual(strip_fillers("please can you show history"), "show history")
        self.assertEqual(strip_fillers("help me"), "")
        self.assertEqual(strip_fillers("help"), "help")
        self.assertEqual(strip_fillers("pleased to pay"), "pleased to pay")


class TestVoiceUtteranceMatcher(unittest.TestCase):

    def setUp(self):
        self.sink = RecordingSink()
        self.dispatcher = CommandDispatcher([self.sink])
        self.matcher = VoiceUtteranceMatcher(self.dispatcher, cfg=Config())

    def test_wake_phrase_with_command(self):
        result = self.matcher.process("Hey Bank check balance", 0.0)
        self.assertEqual(result.wake_phrase, "hey bank")
        self.assertEqual(result.command_text, "check balance")
        self.assertEqual(result.action, "balance")
        self.assertEqual(self.matcher.state, VoiceState.AWAKE)

        event = self.dispatcher.poll(0.8)
        self.assertEqual(event.action, "balance")
        self.assertEqual(event.source, "voice")
        self.assertEqual(self.sink.actions, ["balance"])

    def test_dormant_ignores_commands(self):
        self.assertIsNone(self.matcher.process("balance", 0.0))
        self.assertIsNone(self.dispatcher.poll(5.0))
        self.assertEqual(self.sink.commands, [])
        self.assertEqual(self.matcher.state, VoiceState.DORMANT)

    def test_wake_phrase_alone_prompts(self):
        result = self.matcher.process("hey bank", 0.0)
        self.assertIsNone(result.action)
        self.assertEqual(result.response_text, LISTENING_PROMPT)
        self.dispatcher.poll(1.0)
        self.assertEqual(self.sink.commands, [(None, LISTENING_PROMPT, False)])

    def test_longer_wake_phrase_wins(self):
        result = self.matcher.process("hello banking", 0.0)
        self.assertEqual(result.wake_phrase, "hello banking")
        self.assertEqual(result.command_text, "")
        self.assertEqual(result.response_text, LISTENING_PROMPT)

        self.dispatcher.poll(1.0)
        result = self.matcher.process("hey banking show history", 2.0)
        self.assertEqual(result.command_text, "show history")
        self.assertEqual(result.action, "transactions")

    def test_awake_accepts_plain_command(self):
        self.matcher.process("hey bank", 0.0)
        self.dispatcher.poll(1.0)
        result = self.matcher.process("recent transactions", 5.0)
        self.assertEqual(result.action, "transactions")

    def test_fillers_removed_after_wake_phrase(self):
        result = self.matcher.process("hey bank please can you lock my account", 0.0)
        self.assertEqual(result.command_text, "lock my account")
        self.assertEqual(result.action, "emergency")
        self.assertTrue(result.urgent)

    def test_not_understood(self):
        result = self.matcher.process("hey bank what's the weather", 0.0)
        self.assertIsNone(result.action)
        self.assertIn('I heard "what\'s the weather"', result.response_text)
        self.dispatcher.poll(1.0)
        self.assertEqual(self.sink.actions, [None])

    def test_wake_window_expires(self):
        self.matcher.process("hey bank", 0.0)
        self.matcher.tick(14.9)
        self.assertEqual(self.matcher.state, VoiceState.AWAKE)
        self.matcher.tick(15.0)
        self.assertEqual(self.matcher.state, VoiceState.DORMANT)

        self.dispatcher.poll(20.0)
        self.assertIsNone(self.matcher.process("balance", 20.0))
        self.dispatcher.poll(25.0)
        self.assertEqual(self.sink.actions, [None])

    def test_utterance_extends_window(self):
        self.matcher.process("hey bank", 0.0)
        self.dispatcher.poll(1.0)
        self.matcher.process("what's the weather", 10.0)
        self.dispatcher.poll(11.0)
        self.matcher.tick(20.0)
        self.assertEqual(self.matcher.state, VoiceState.AWAKE)
        self.matcher.tick(25.0)
        self.assertEqual(self.matcher.state, VoiceState.DORMANT)

    def test_overlapping_utterance_is_dropped(self):
        self.matcher.process("hey bank balance", 0.0)
        self.matcher.process("hey bank bills", 0.3)
        self.dispatcher.poll(2.0)
        self.assertEqual(self.sink.actions, ["balance"])

    def test_reset_discards_pending_response(self):
        self.matcher.process("hey bank balance", 0.0)
        self.matcher.reset()
        self.assertIsNone(self.dispatcher.poll(1.0))
        self.assertEqual(self.matcher.state, VoiceState.DORMANT)
        self.assertEqual(self.sink.commands, [])


class FakeEngine:

    def __init__(self, failures=0):
        self.starts = 0
        self.failures = failures

    def __call__(self):
        self.starts += 1
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("audio device busy")


class TestListenerLoop(unittest.TestCase):

    def setUp(self):
        self.engine = FakeEngine()
        self.resets = 0
        self.loop = ListenerLoop(self.engine, Config(), on_reset=self.count_reset)

    def count_reset(self):
        self.resets += 1

    def test_restarts_after_end_of_stream(self):
        self.assertTrue(self.loop.start(0.0))
        self.loop.on_end(1.0)
        self.assertEqual(self.loop.state, ListenerState.RESTARTING)
        self.loop.tick(1.05)
        self.assertEqual(self.engine.starts, 1)
        self.loop.tick(1.2)
        self.assertEqual(self.engine.starts, 2)
        self.assertEqual(self.loop.state, ListenerState.LISTENING)

    def test_error_backoff_then_failure(self):
        self.loop.start(0.0)
        now = 0.0
        delays = []
        for _ in range(5):
            self.loop.on_error(now, "network")
            delays.append(round(self.loop.restart_at - now, 3))
            now = self.loop.restart_at
            self.loop.tick(now)
        self.assertEqual(delays, [1.0, 2.0, 4.0, 8.0, 8.0])
        self.assertEqual(self.resets, 5)

        self.loop.on_error(now, "network")
        self.assertEqual(self.loop.state, ListenerState.FAILED)
        self.loop.tick(now + 100)
        self.assertEqual(self.engine.starts, 6)

    def test_result_clears_error_count(self):
        self.loop.start(0.0)
        self.loop.on_error(0.0, "network")
        self.loop.tick(1.0)
        self.loop.on_result()
        self.loop.on_error(2.0, "network")
        self.assertAlmostEqual(self.loop.restart_at, 3.0)

    def test_fatal_error_stops(self):
        self.loop.start(0.0)
        self.loop.on_error(0.5, "not-allowed")
        self.assertEqual(self.loop.state, ListenerState.FAILED)

    def test_engine_start_failure_is_retried(self):
        loop = ListenerLoop(FakeEngine(failures=1), Config())
        self.assertFalse(loop.start(0.0))
        self.assertEqual(loop.state, ListenerState.RESTARTING)
        loop.tick(1.0)
        self.assertEqual(loop.state, ListenerState.LISTENING)

    def test_stop_ignores_late_events(self):
        self.loop.start(0.0)
        self.loop.stop()
        self.loop.on_end(1.0)
        self.loop.on_error(1.0, "network")
        self.loop.tick(10.0)
        self.assertEqual(self.loop.state, ListenerState.STOPPED)
        self.assertEqual(self.engine.starts, 1)


class TestVoicePipeline(unittest.TestCase):

    def setUp(self):
        self.sink = RecordingSink()
        self.dispatcher = CommandDispatcher([self.sink])
        self.engine = FakeEngine()
        self.pipeline = VoicePipeline(self.dispatcher, cfg=Config(), start_engine=self.engine)
        self.assertTrue(self.pipeline.start(0.0))

    def test_interim_transcripts_only_update_display(self):
        self.assertIsNone(self.pipeline.on_transcript("hey bank check", False, 0.1))
        self.assertEqual(self.pipeline.raw_transcript, "hey bank check")
        self.assertEqual(self.pipeline.state, VoiceState.DORMANT)
        self.assertFalse(self.dispatcher.busy)

    def test_final_transcript_dispatches(self):
        result = self.pipeline.on_transcript("hey bank check balance", True, 0.5)
        self.assertEqual(result.action, "balance")
        self.pipeline.tick(1.5)
        self.assertEqual(self.sink.commands, [("balance", "Your current balance is $2,847.32", False)])

    def test_engine_error_returns_to_dormant(self):
        self.pipeline.on_transcript("hey bank", True, 0.0)
        self.pipeline.on_engine_error(0.5, "network")
        self.assertEqual(self.pipeline.state, VoiceState.DORMANT)
        self.pipeline.tick(1.5)
        self.assertEqual(self.engine.starts, 2)

    def test_end_of_stream_restarts(self):
        self.pipeline.on_engine_end(1.0)
        self.pipeline.tick(1.2)
        self.assertEqual(self.engine.starts, 2)
        self.assertEqual(self.pipeline.listener.state, ListenerState.LISTENING)

    def test_stop_resets_session(self):
        self.pipeline.on_transcript("hey bank", True, 0.0)
        self.pipeline.stop()
        self.assertEqual(self.pipeline.state, VoiceState.DORMANT)
        self.assertIsNone(self.pipeline.on_transcript("hey bank balance", True, 1.0))

    def test_refuses_to_start_without_speech(self):
        pipeline = VoicePipeline(CommandDispatcher(), cfg=Config(), speech_supported=False)
        self.assertFalse(pipeline.start(0.0))
        self.assertIsNone(pipeline.on_transcript("hey bank balance", True, 0.0))


if __name__ == "__main__":
    unittest.main()
