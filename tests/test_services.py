"""Service clients exercised against in-memory transports."""

from __future__ import annotations

import asyncio
import gzip
import json

import httpx
import pytest
from botocore.exceptions import ClientError

from app.config.settings import CartesiaConfig, GroqConfig
from app.pipelines.voice import ChatMessage
from app.services.errors import CollaboratorRateLimited
from app.services.llm_client import BedrockChatClient, LlmInvocationError, to_converse_payload
from app.services.speech_synthesis import CartesiaTtsClient, SpeechSynthesisError
from app.services.speech_to_text import SpeechToTextError, WhisperTranscriptionClient


def _http_client(handler, base_url: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


def test_cartesia_requests_raw_pcm_and_streams_body():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["payload"] = json.loads(request.content)
        return httpx.Response(200, content=b"\x00\x01\x02\x03" * 64)

    config = CartesiaConfig()
    tts = CartesiaTtsClient(config, client=_http_client(handler, config.base_url))

    async def scenario():
        stream = await tts.synthesize("Hello there")
        return b"".join([chunk async for chunk in stream])

    audio = asyncio.run(scenario())

    assert audio == b"\x00\x01\x02\x03" * 64
    assert seen["path"] == "/tts/bytes"
    assert seen["payload"]["transcript"] == "Hello there"
    assert seen["payload"]["voice"] == {"mode": "id", "id": config.voice_id}
    assert seen["payload"]["output_format"] == {
        "container": "raw",
        "encoding": "pcm_f32le",
        "sample_rate": 24000,
    }


def test_cartesia_gzip_body_is_streamed_as_decoded_pcm():
    pcm = bytes(range(256)) * 4

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=gzip.compress(pcm),
            headers={"Content-Encoding": "gzip"},
        )

    config = CartesiaConfig()
    tts = CartesiaTtsClient(config, client=_http_client(handler, config.base_url))

    async def scenario():
        stream = await tts.synthesize("Hello there")
        return b"".join([chunk async for chunk in stream])

    assert asyncio.run(scenario()) == pcm


def test_cartesia_error_keeps_diagnostic_on_exception():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text='{"error": "invalid api key"}')

    config = CartesiaConfig()
    tts = CartesiaTtsClient(config, client=_http_client(handler, config.base_url))

    with pytest.raises(SpeechSynthesisError) as excinfo:
        asyncio.run(tts.synthesize("Hello"))

    assert excinfo.value.status_code == 401
    assert "invalid api key" in excinfo.value.diagnostic
    assert "invalid api key" not in str(excinfo.value)


def test_whisper_returns_text_field():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/audio/transcriptions")
        assert b"whisper-large-v3" in request.content
        return httpx.Response(200, json={"text": " hello there "})

    config = GroqConfig()
    stt = WhisperTranscriptionClient(config, client=_http_client(handler, config.base_url))

    text = asyncio.run(stt.transcribe(b"audio", filename="clip.webm", content_type="audio/webm"))

    assert text == " hello there "


@pytest.mark.parametrize(
    ("status_code", "expected"),
    [(429, CollaboratorRateLimited), (500, SpeechToTextError), (400, SpeechToTextError)],
)
def test_whisper_error_statuses(status_code, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"error": {"message": "nope"}})

    config = GroqConfig()
    stt = WhisperTranscriptionClient(config, client=_http_client(handler, config.base_url))

    with pytest.raises(expected):
        asyncio.run(stt.transcribe(b"audio"))


def test_converse_payload_splits_system_and_merges_same_role_turns():
    system, messages = to_converse_payload(
        [
            ChatMessage(role="system", content="be brief"),
            ChatMessage(role="user", content="first"),
            ChatMessage(role="user", content="second"),
            ChatMessage(role="assistant", content="answer"),
            ChatMessage(role="user", content="third"),
        ]
    )

    assert system == [{"text": "be brief"}]
    assert messages == [
        {"role": "user", "content": [{"text": "first"}, {"text": "second"}]},
        {"role": "assistant", "content": [{"text": "answer"}]},
        {"role": "user", "content": [{"text": "third"}]},
    ]


def test_converse_payload_starts_with_user_when_history_opens_with_assistant():
    system, messages = to_converse_payload(
        [
            ChatMessage(role="system", content="be brief"),
            ChatMessage(role="assistant", content="Hi, I'm Swift."),
            ChatMessage(role="user", content="hello"),
        ]
    )

    assert system == [
        {"text": "be brief"},
        {"text": "Earlier in this conversation you said: Hi, I'm Swift."},
    ]
    assert messages == [{"role": "user", "content": [{"text": "hello"}]}]


def test_converse_payload_drops_blank_turns():
    system, messages = to_converse_payload(
        [
            ChatMessage(role="system", content="be brief"),
            ChatMessage(role="user", content="first"),
            ChatMessage(role="assistant", content=""),
            ChatMessage(role="user", content="   "),
            ChatMessage(role="user", content="second"),
        ]
    )

    assert system == [{"text": "be brief"}]
    assert messages == [
        {"role": "user", "content": [{"text": "first"}, {"text": "second"}]},
    ]
    assert all(block["text"].strip() for message in messages for block in message["content"])


class FakeBedrockRuntime:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.kwargs = None

    def converse(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def test_bedrock_client_joins_text_blocks():
    runtime = FakeBedrockRuntime(
        response={"output": {"message": {"content": [{"text": "Hi"}, {"text": "there."}]}}}
    )
    client = BedrockChatClient(client=runtime)

    reply = asyncio.run(
        client.complete([ChatMessage(role="system", content="sys"), ChatMessage(role="user", content="hello")])
    )

    assert reply == "Hi\nthere."
    assert runtime.kwargs["system"] == [{"text": "sys"}]
    assert runtime.kwargs["messages"] == [{"role": "user", "content": [{"text": "hello"}]}]


def test_bedrock_client_empty_output_is_none():
    client = BedrockChatClient(client=FakeBedrockRuntime(response={"output": {"message": {"content": []}}}))

    assert asyncio.run(client.complete([ChatMessage(role="user", content="hello")])) is None


def test_bedrock_throttling_is_rate_limited():
    error = ClientError({"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "Converse")
    client = BedrockChatClient(client=FakeBedrockRuntime(error=error))

    with pytest.raises(CollaboratorRateLimited):
        asyncio.run(client.complete([ChatMessage(role="user", content="hello")]))


def test_bedrock_validation_error_is_invocation_error():
    error = ClientError({"Error": {"Code": "ValidationException", "Message": "bad"}}, "Converse")
    client = BedrockChatClient(client=FakeBedrockRuntime(error=error))

    with pytest.raises(LlmInvocationError):
        asyncio.run(client.complete([ChatMessage(role="user", content="hello")]))
