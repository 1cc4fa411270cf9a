"""Voice request pipeline package.

Modules are organised by the order in which ``POST /api`` executes them;
``flow.VoicePipeline`` composes the stages and documents their order.
"""

from .assembly import assemble_response, encode_header_text
from .collaborators import VoiceCollaborators
from .context import resolve_ambient_context
from .errors import (
    EmptyCompletion,
    IdentityResolutionFailed,
    InvalidAudio,
    InvalidRequest,
    LogWriteFailed,
    RateLimited,
    SynthesisFailed,
    VoicePipelineError,
)
from .flow import PipelineStage, VoicePipeline
from .identity import resolve_caller_identity
from .ingestion import parse_voice_request
from .llm import build_reply_messages, generate_reply
from .persistence import ConversationLogger
from .synthesis import synthesize_reply
from .transcription import transcribe_input
from .types import (
    AmbientContext,
    AudioUpload,
    CallerIdentity,
    ChatMessage,
    LogRecord,
    LogWriteResult,
    PipelineResult,
    VoiceRequest,
)

__all__ = [
    "AmbientContext",
    "AudioUpload",
    "CallerIdentity",
    "ChatMessage",
    "ConversationLogger",
    "EmptyCompletion",
    "IdentityResolutionFailed",
    "InvalidAudio",
    "InvalidRequest",
    "LogRecord",
    "LogWriteFailed",
    "LogWriteResult",
    "PipelineResult",
    "PipelineStage",
    "RateLimited",
    "SynthesisFailed",
    "VoiceCollaborators",
    "VoicePipeline",
    "VoicePipelineError",
    "VoiceRequest",
    "assemble_response",
    "build_reply_messages",
    "encode_header_text",
    "generate_reply",
    "parse_voice_request",
    "resolve_ambient_context",
    "resolve_caller_identity",
    "synthesize_reply",
    "transcribe_input",
]
