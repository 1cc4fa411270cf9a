"""Shared fixtures wiring the fake collaborators into the application."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.controllers.dependencies import get_collaborators
from app.main import app
from app.pipelines.voice import VoiceCollaborators
from fakes import (
    FakeCompletion,
    FakeIdentity,
    FakeMessageLog,
    FakeSpeechToText,
    FakeSynthesizer,
)


@pytest.fixture
def collaborators() -> VoiceCollaborators:
    return VoiceCollaborators(
        speech_to_text=FakeSpeechToText(),
        identity=FakeIdentity(),
        message_log=FakeMessageLog(),
        completion=FakeCompletion(),
        synthesizer=FakeSynthesizer(),
    )


@pytest.fixture
def client(collaborators: VoiceCollaborators):
    """Test client whose collaborators are the in-memory fakes."""

    app.dependency_overrides[get_collaborators] = lambda: collaborators
    yield TestClient(app)
    app.dependency_overrides.clear()
