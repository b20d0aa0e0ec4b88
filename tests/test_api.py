"""HTTP tests for the FastAPI routers."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from voice_tutor.api import create_app
from voice_tutor.api.routers.rag import FALLBACK_ANSWER
from voice_tutor.services.llm_client import GenerationError
from voice_tutor.services.twiml import APOLOGY_MESSAGE
from voice_tutor.services.ultravox_service import VoiceSessionError

TEXTBOOK = " ".join(
    [
        "A firewall monitors network traffic and blocks connections that break security rules.",
        "Phishing tricks users into revealing passwords by pretending to be a trusted website.",
        "Strong passwords mix letters, numbers and symbols and are never shared with friends.",
    ]
    * 3
)


@pytest.fixture
def client(services):
    with TestClient(create_app(services)) as client:
        yield client


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestTwilioWebhooks:
    def test_incoming_call_returns_stream_twiml(self, client, services, voice_sessions):
        response = client.post("/api/twilio/incoming-call", data={"CallSid": "CA1", "From": "+8801711111111"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert 'action="http://testserver/api/twilio/stream-ended"' in response.text
        assert 'url="wss://voice.example/join/uv-123"' in response.text
        voice_sessions.create_call.assert_awaited_once_with("CA1", "http://testserver")
        assert "CA1" in services.registry

    def test_forwarded_headers_set_callback_base(self, client, voice_sessions):
        client.post(
            "/api/twilio/incoming-call",
            data={"CallSid": "CA1", "From": "+880"},
            headers={"x-forwarded-host": "abc.ngrok.app", "x-forwarded-proto": "https"},
        )

        voice_sessions.create_call.assert_awaited_once_with("CA1", "https://abc.ngrok.app")

    def test_configured_public_url_wins(self, services, voice_sessions):
        services.settings.public_base_url = "https://tutor.example.com/"
        with TestClient(create_app(services)) as client:
            client.post(
                "/api/twilio/incoming-call",
                data={"CallSid": "CA1"},
                headers={"x-forwarded-host": "abc.ngrok.app", "x-forwarded-proto": "https"},
            )

        voice_sessions.create_call.assert_awaited_once_with("CA1", "https://tutor.example.com")

    def test_missing_call_sid_apologizes(self, client, voice_sessions):
        response = client.post("/api/twilio/incoming-call", data={"From": "+880"})

        assert APOLOGY_MESSAGE in response.text
        voice_sessions.create_call.assert_not_awaited()

    def test_remote_session_failure_apologizes(self, client, services, voice_sessions):
        voice_sessions.create_call.side_effect = VoiceSessionError("Failed to create Ultravox call: 401")

        response = client.post("/api/twilio/incoming-call", data={"CallSid": "CA1", "From": "+880"})

        assert response.status_code == 200
        assert APOLOGY_MESSAGE in response.text
        assert len(services.registry) == 0

    def test_call_lifecycle_stores_one_summary(self, services, voice_sessions):
        with TestClient(create_app(services)) as client:
            client.post("/api/twilio/incoming-call", data={"CallSid": "CA1", "From": "+880"})
            active = client.get("/api/twilio/active-calls").json()
            ended = client.post("/api/twilio/stream-ended", data={"CallSid": "CA1", "CallStatus": "completed"})
            status = client.post(
                "/api/twilio/call-status",
                data={"CallSid": "CA1", "CallStatus": "completed", "CallDuration": "95"},
            )

        assert [c["call_id"] for c in active] == ["CA1"]
        assert active[0]["state"] == "active"
        assert "<Hangup" in ended.text
        assert status.text == "OK"
        assert len(services.registry) == 0
        voice_sessions.fetch_transcript.assert_awaited_once_with("uv-123")
        summaries = services.repository.list_all()
        assert len(summaries) == 1
        assert summaries[0].call_id == "CA1"
        assert summaries[0].caller_number == "+880"
        assert summaries[0].status == "summarized"

    def test_call_status_for_unknown_call(self, client):
        response = client.post("/api/twilio/call-status", data={"CallSid": "CA404", "CallStatus": "completed"})

        assert response.status_code == 200
        assert response.text == "OK"


class TestRagTool:
    def test_answers_from_textbook(self, client, services, generator):
        client.post("/api/textbooks/ingest-text", json={"text": TEXTBOOK, "source_name": "ict.md"})
        generator.generate.return_value = "A firewall blocks unsafe connections."

        response = client.post("/api/rag/query", json={"question": "What does a firewall do?"})

        assert response.status_code == 200
        assert response.json() == {"result": "A firewall blocks unsafe connections."}
        assert "firewall monitors network traffic" in generator.generate.await_args.args[0]

    @pytest.mark.parametrize("body", [{}, {"question": ""}, {"question": "   "}])
    def test_blank_question(self, client, generator, body):
        response = client.post("/api/rag/query", json=body)

        assert response.status_code == 400
        assert response.json() == {"result": "No question was provided. Please ask a specific question."}
        generator.generate.assert_not_awaited()

    def test_generation_failure_returns_fallback(self, client, generator):
        generator.generate.side_effect = GenerationError("timeout")

        response = client.post("/api/rag/query", json={"question": "What is phishing?"})

        assert response.status_code == 200
        assert response.json() == {"result": FALLBACK_ANSWER}


class TestQueryEndpoints:
    def test_ask(self, client, generator):
        generator.generate.return_value = "Phishing steals passwords."

        response = client.post("/api/query/ask", json={"question": "What is phishing?"})

        assert response.json()["answer"] == "Phishing steals passwords."
        assert response.json()["source"] == "textbook-rag"

    def test_ask_requires_question(self, client):
        assert client.post("/api/query/ask", json={"question": " "}).status_code == 400

    def test_ask_reports_error(self, client, generator):
        generator.generate.side_effect = GenerationError("Groq API key not configured")

        response = client.post("/api/query/ask", json={"question": "What is phishing?"})

        assert response.status_code == 200
        assert response.json()["error"] == "Groq API key not configured"
        assert response.json()["answer"] is None

    def test_simple_defaults_to_hello(self, client, generator):
        generator.generate.return_value = "Hi!"

        response = client.post("/api/query/simple", json={})

        assert response.json() == {"question": "Hello", "answer": "Hi!", "source": None, "error": None}


class TestTextbooks:
    def test_upload_text_file(self, client, services):
        response = client.post(
            "/api/textbooks/upload",
            files={"file": ("chapter7.txt", TEXTBOOK.encode(), "text/plain")},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "success"
        assert body["filename"] == "chapter7.txt"
        assert body["chunks_created"] == services.index.count() >= 1
        assert client.get("/api/textbooks/health").json()["indexed_passages"] == body["chunks_created"]

    def test_upload_unsupported_type(self, client):
        response = client.post(
            "/api/textbooks/upload",
            files={"file": ("slides.pptx", b"binary", "application/octet-stream")},
        )

        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    def test_upload_empty_file(self, client):
        response = client.post("/api/textbooks/upload", files={"file": ("chapter.txt", b"", "text/plain")})

        assert response.status_code == 400

    def test_upload_unreadable_pdf(self, client):
        response = client.post(
            "/api/textbooks/upload",
            files={"file": ("broken.pdf", b"not a pdf", "application/pdf")},
        )

        assert response.status_code == 422
        assert response.json()["detail"].startswith("Failed to process textbook:")

    def test_ingest_text_too_short(self, client):
        response = client.post("/api/textbooks/ingest-text", json={"text": "Too short."})

        assert response.status_code == 422

    def test_ingest_blank_text(self, client):
        assert client.post("/api/textbooks/ingest-text", json={"text": "  "}).status_code == 400


class TestSummaries:
    def test_generate_and_fetch(self, client, voice_sessions):
        created = client.post(
            "/api/summaries/generate",
            json={"call_id": "CA9", "remote_session_id": "uv-9", "caller_number": "+8809"},
        ).json()

        assert created["status"] == "summarized"
        assert created["topics_discussed"] == "networking, security"
        voice_sessions.fetch_transcript.assert_awaited_once_with("uv-9")
        assert client.get(f"/api/summaries/{created['id']}").json()["call_id"] == "CA9"
        assert client.get("/api/summaries/call/CA9").json()["id"] == created["id"]
        assert [s["call_id"] for s in client.get("/api/summaries/caller/+8809").json()] == ["CA9"]
        assert len(client.get("/api/summaries").json()) == 1

    def test_generate_without_call_id_uses_manual_id(self, client):
        created = client.post("/api/summaries/generate", json={"remote_session_id": "uv-9"}).json()

        assert created["call_id"].startswith("manual-")
        assert created["caller_number"] == "unknown"

    def test_generate_for_session(self, client):
        response = client.post("/api/summaries/generate/uv-7")

        assert response.status_code == 200
        assert response.json()["remote_session_id"] == "uv-7"

    def test_generate_requires_remote_session(self, client):
        response = client.post("/api/summaries/generate", json={"remote_session_id": " "})

        assert response.status_code == 400

    def test_failed_transcript_is_stored_as_failed(self, client, voice_sessions):
        voice_sessions.fetch_transcript = AsyncMock(side_effect=RuntimeError("upstream down"))

        created = client.post("/api/summaries/generate", json={"remote_session_id": "uv-9"}).json()

        assert created["status"] == "failed"
        assert created["summary"] == "Error processing call: upstream down"

    def test_missing_summary(self, client):
        assert client.get("/api/summaries/999").status_code == 404
        assert client.get("/api/summaries/call/CA404").status_code == 404
