"""Ultravox voice AI service for call sessions and transcripts."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are Education AI, a knowledgeable and friendly tutor for the NCTB Class 9-10 ICT (Information and Communication Technology) curriculum from Bangladesh. You are speaking with students over the phone, so respond conversationally, like a trusted teacher who knows every page of their textbook.

Voice guidelines:
- Speak casually and warmly. Keep answers to two to four sentences for simple questions and break complex topics into small parts.
- Never use bullet points, numbered lists, emojis or any formatting that does not work in speech.
- Say numbers clearly, for example "nine dash ten" instead of "9-10".
- Be encouraging. If a student seems confused, offer a simpler explanation or an everyday example from Bangladesh.

Using the textbook:
- Whenever a student asks about a topic from their course, call the searchTextbook tool with their question and base your answer on what it returns.
- Reference the material naturally, for example "From the ICT textbook, I can tell you that..."
- If a question is outside the ICT curriculum, say your specialty is ICT for class nine and ten and suggest they ask their teacher.

Welcome each student warmly and let them know you are here to help them master ICT."""

TOOL_DESCRIPTION = (
    "Searches the textbook to find relevant information to answer the student's question. "
    "Use this tool when the student asks about any topic from their textbook or course material."
)

MAX_TRANSCRIPT_PAGES = 20


class VoiceSessionError(Exception):
    """Raised when the voice AI provider rejects or fails a request."""


@dataclass
class RemoteSession:
    call_id: str
    join_url: str


class VoiceSessionProvider(Protocol):
    async def create_call(self, call_sid: str, base_url: str) -> RemoteSession: ...

    async def fetch_transcript(self, remote_call_id: str) -> str: ...


class UltravoxService:
    """Service for creating Ultravox calls and reading their transcripts."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.ultravox.ai/api",
        model: str = "fixie-ai/ultravox",
        voice: str = "Mark",
        temperature: float = 0.3,
        timeout: httpx.Timeout | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.voice = voice
        self.temperature = temperature
        self.timeout = timeout or httpx.Timeout(60.0, connect=30.0)
        self._transport = transport
        self.headers = {
            "X-API-Key": api_key,
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def build_tools(self, base_url: str) -> list[dict]:
        """Declare the textbook search tool the remote session calls mid-call."""
        return [
            {
                "temporaryTool": {
                    "modelToolName": "searchTextbook",
                    "description": TOOL_DESCRIPTION,
                    "dynamicParameters": [
                        {
                            "name": "question",
                            "location": "PARAMETER_LOCATION_BODY",
                            "schema": {
                                "type": "string",
                                "description": "The student's question to search for in the textbook",
                            },
                            "required": True,
                        }
                    ],
                    "http": {
                        "baseUrlPattern": f"{base_url}/api/rag/query",
                        "httpMethod": "POST",
                    },
                }
            }
        ]

    def build_call_config(self, base_url: str) -> dict:
        return {
            "systemPrompt": SYSTEM_PROMPT,
            "model": self.model,
            "voice": self.voice,
            "temperature": self.temperature,
            "firstSpeaker": "FIRST_SPEAKER_AGENT",
            "medium": {"twilio": {}},
            "selectedTools": self.build_tools(base_url),
        }

    async def create_call(self, call_sid: str, base_url: str) -> RemoteSession:
        """Create an Ultravox call bridged over a Twilio media stream."""
        logger.info(f"Creating Ultravox call for CallSid: {call_sid}")

        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self.base_url}/calls",
                    json=self.build_call_config(base_url),
                    headers=self.headers,
                )
            except httpx.HTTPError as e:
                raise VoiceSessionError(f"Ultravox request failed: {e!r}") from e

        if response.is_error:
            logger.error(f"Failed to create Ultravox call: {response.status_code} - {response.text}")
            raise VoiceSessionError(f"Failed to create Ultravox call: {response.status_code}")

        data = response.json()
        join_url = data.get("joinUrl")
        if not join_url:
            raise VoiceSessionError("Ultravox response is missing joinUrl")
        remote_id = data.get("callId") or data.get("uuid") or "unknown"

        logger.info(f"Ultravox call created. Call ID: {remote_id}, Join URL: {join_url}")
        return RemoteSession(call_id=remote_id, join_url=join_url)

    async def fetch_transcript(self, remote_call_id: str) -> str:
        """Return the call's messages as ``role: text`` lines.

        A non-success status yields an empty transcript; transport errors raise.
        """
        lines: list[str] = []
        url: str | None = f"{self.base_url}/calls/{remote_call_id}/messages"

        async with self._client() as client:
            for _ in range(MAX_TRANSCRIPT_PAGES):
                if not url:
                    break
                response = await client.get(url, headers=self.headers)
                if response.is_error:
                    logger.warning(
                        f"Failed to fetch transcript: {response.status_code} - {response.reason_phrase}"
                    )
                    return ""

                data = response.json()
                for message in data.get("results", []):
                    text = (message.get("text") or "").strip()
                    if text:
                        lines.append(f"{message.get('role', 'unknown')}: {text}")
                url = data.get("next")

        return "\n".join(lines)
