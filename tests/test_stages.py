"""Unit tests for individual voice pipeline stages."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from app.pipelines.voice import (
    AmbientContext,
    CallerIdentity,
    ConversationLogger,
    EmptyCompletion,
    VoiceCollaborators,
    VoicePipeline,
    VoiceRequest,
    build_reply_messages,
    encode_header_text,
    generate_reply,
)
from app.pipelines.voice.prompts import build_system_prompt
from app.views.voice import ConversationTurn

from fakes import FakeCompletion, FakeIdentity, FakeSpeechToText, FakeSynthesizer

AMBIENT = AmbientContext(location_label="Lisbon, 11, PT", local_time="10/19/2026, 8:04:05 PM")
FIXED_NOW = datetime(2026, 10, 19, 19, 4, 5, tzinfo=timezone.utc)


class FlakyMessageLog:
    """Fails the first append and accepts the rest."""

    def __init__(self) -> None:
        self.attempts = 0
        self.records = []

    async def append(self, record) -> None:
        self.attempts += 1
        if self.attempts == 1:
            raise TimeoutError("insert timed out")
        self.records.append(record)


def test_log_writes_are_independent_and_return_results():
    message_log = FlakyMessageLog()

    async def scenario():
        logger = ConversationLogger(message_log, clock=lambda: FIXED_NOW)
        identity = CallerIdentity(id="user-1")
        logger.record_turn(identity, "user", "hello")
        logger.record_turn(identity, "assistant", "Hi there.")
        return await logger.drain()

    results = asyncio.run(scenario())

    assert [r.ok for r in results] == [False, True]
    assert "insert timed out" in results[0].error
    assert "2026-10-19T19:04:05+00:00" in results[0].error
    assert message_log.records[0].role == "assistant"
    assert message_log.records[0].source == "assistant"
    assert message_log.records[0].iso_timestamp == "2026-10-19T19:04:05+00:00"


def test_drain_without_writes_is_empty():
    logger = ConversationLogger(FlakyMessageLog())

    assert asyncio.run(logger.drain()) == []


def test_user_turn_records_voice_source():
    logger = ConversationLogger(FlakyMessageLog(), clock=lambda: FIXED_NOW)

    record = logger.build_record(CallerIdentity(), "user", "hello")

    assert record.user_id == "anonymous"
    assert record.source == "voice"


def test_reply_messages_order():
    history = [
        ConversationTurn(role="user", content="one"),
        ConversationTurn(role="assistant", content="two"),
    ]

    messages = build_reply_messages("three", history, AMBIENT)

    assert [m.role for m in messages] == ["system", "user", "assistant", "user"]
    assert [m.content for m in messages[1:]] == ["one", "two", "three"]


def test_system_prompt_mentions_context_and_constraints():
    prompt = build_system_prompt(AMBIENT, assistant_name="Swift")

    assert "You are Swift" in prompt
    assert "User location is Lisbon, 11, PT." in prompt
    assert "The current time is 10/19/2026, 8:04:05 PM." in prompt
    assert "Do not use markdown, emojis" in prompt
    assert "real-time data" in prompt


def test_generate_reply_returns_completion_text_unchanged():
    completion = FakeCompletion(reply="  Sure thing.\n")

    reply = asyncio.run(generate_reply("hi", [], AMBIENT, completion))

    assert reply == "  Sure thing.\n"


@pytest.mark.parametrize("reply", [None, "", "   "])
def test_generate_reply_rejects_empty_content(reply):
    with pytest.raises(EmptyCompletion):
        asyncio.run(generate_reply("hi", [], AMBIENT, FakeCompletion(reply=reply)))


def test_header_encoding_matches_encode_uri_component():
    assert encode_header_text("a b&c/é") == "a%20b%26c%2F%C3%A9"
    assert encode_header_text("it's (ok)! ~*_.-") == "it's%20(ok)!%20~*_.-"


def test_pipeline_describes_stages_in_order():
    stages = list(VoicePipeline.describe())

    assert [s.order for s in stages] == sorted(s.order for s in stages)
    assert stages[0].name == "Validation"
    assert stages[-1].name == "Response Assembly"


class SlowMessageLog:
    """Accepts every append after yielding to the event loop."""

    def __init__(self) -> None:
        self.records = []

    async def append(self, record) -> None:
        await asyncio.sleep(0.01)
        self.records.append(record)


def test_abandoned_audio_stream_still_finishes_both_log_writes():
    message_log = SlowMessageLog()
    collaborators = VoiceCollaborators(
        speech_to_text=FakeSpeechToText(),
        identity=FakeIdentity(),
        message_log=message_log,
        completion=FakeCompletion(),
        synthesizer=FakeSynthesizer(),
    )

    async def scenario():
        conversation_log = ConversationLogger(message_log)
        pipeline = VoicePipeline(collaborators)
        result = await pipeline.run(
            VoiceRequest(input="hello"),
            headers={},
            conversation_log=conversation_log,
        )
        first_chunk = await result.audio_stream.__anext__()
        await result.audio_stream.aclose()
        return first_chunk, conversation_log.pending

    first_chunk, pending = asyncio.run(scenario())

    assert first_chunk == b"\x00\x00\x80\x3f"
    assert pending == 0
    assert sorted(record.role for record in message_log.records) == ["assistant", "user"]
