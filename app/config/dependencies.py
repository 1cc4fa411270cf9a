"""Construction of the process-lifetime collaborator clients."""

from __future__ import annotations

from app.config.settings import Settings, settings as default_settings
from app.pipelines.voice import VoiceCollaborators


def build_collaborators(config: Settings | None = None) -> VoiceCollaborators:
    """Instantiate the concrete service clients from settings."""

    from app.services.identity import JwtIdentityProvider
    from app.services.llm_client import BedrockChatClient
    from app.services.message_log import SqlMessageLog
    from app.services.speech_synthesis import CartesiaTtsClient
    from app.services.speech_to_text import WhisperTranscriptionClient

    config = config or default_settings
    return VoiceCollaborators(
        speech_to_text=WhisperTranscriptionClient(config.groq),
        identity=JwtIdentityProvider(config.identity),
        message_log=SqlMessageLog(),
        completion=BedrockChatClient(config.bedrock),
        synthesizer=CartesiaTtsClient(config.cartesia),
    )


__all__ = ["build_collaborators"]
