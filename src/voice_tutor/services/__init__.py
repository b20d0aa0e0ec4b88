"""Adapters for the telephony, voice AI and generation providers."""

from .llm_client import GenerationError, GroqTextGenerator, TextGenerator
from .ultravox_service import RemoteSession, UltravoxService, VoiceSessionError, VoiceSessionProvider

__all__ = [
    "GenerationError",
    "GroqTextGenerator",
    "RemoteSession",
    "TextGenerator",
    "UltravoxService",
    "VoiceSessionError",
    "VoiceSessionProvider",
]
