"""Twilio voice webhooks: incoming calls, stream end and call status."""

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import PlainTextResponse, Response

from ...config import Settings
from ...models.session import ActiveCallResponse
from ...services import twiml
from ..dependencies import AppServices, get_services

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


def resolve_base_url(request: Request, settings: Settings) -> str:
    """Public base URL that Twilio and Ultravox can call back on."""
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/")

    # ngrok and reverse proxies
    forwarded_host = request.headers.get("x-forwarded-host")
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_host and forwarded_proto:
        return f"{forwarded_proto}://{forwarded_host}"

    url = request.url
    if url.port is None or DEFAULT_PORTS.get(url.scheme) == url.port:
        return f"{url.scheme}://{url.hostname}"
    return f"{url.scheme}://{url.hostname}:{url.port}"


def _xml(content: str) -> Response:
    return Response(content=content, media_type="application/xml")


@router.post("/incoming-call")
async def incoming_call(
    request: Request,
    call_sid: str | None = Form(default=None, alias="CallSid"),
    caller: str | None = Form(default=None, alias="From"),
    services: AppServices = Depends(get_services),
):
    """
    Handle an incoming call from Twilio.

    Creates an Ultravox session and returns TwiML that streams the call audio
    to it. Twilio calls `/stream-ended` when the stream disconnects.
    """
    if not call_sid or not call_sid.strip():
        logger.warning("Incoming call webhook without CallSid")
        return _xml(twiml.apology_and_hangup())

    base_url = resolve_base_url(request, services.settings)
    logger.info(f"Using base URL for callbacks: {base_url}")
    return _xml(await services.orchestrator.handle_incoming_call(call_sid, caller, base_url))


@router.post("/stream-ended")
async def stream_ended(
    call_sid: str | None = Form(default=None, alias="CallSid"),
    call_status: str | None = Form(default=None, alias="CallStatus"),
    services: AppServices = Depends(get_services),
):
    """Handle the end of the media stream; triggers the call summary."""
    if not call_sid:
        logger.warning("Stream-ended webhook without CallSid")
        return _xml(twiml.hangup())
    return _xml(services.orchestrator.handle_stream_ended(call_sid, call_status))


@router.post("/call-status", response_class=PlainTextResponse)
async def call_status(
    call_sid: str | None = Form(default=None, alias="CallSid"),
    call_status: str | None = Form(default=None, alias="CallStatus"),
    call_duration: str | None = Form(default=None, alias="CallDuration"),
    services: AppServices = Depends(get_services),
):
    """Handle call status callbacks; a completed call triggers the summary."""
    if not call_sid:
        logger.warning("Call-status webhook without CallSid")
        return "OK"
    return services.orchestrator.handle_call_status(call_sid, call_status, call_duration)


@router.get("/active-calls", response_model=list[ActiveCallResponse])
async def active_calls(services: AppServices = Depends(get_services)):
    """List calls currently held in the session registry."""
    records = services.registry.snapshot()
    logger.info(f"Fetching active calls - count: {len(records)}")
    return [
        ActiveCallResponse(
            call_id=r.external_call_id,
            remote_session_id=r.remote_session_id,
            caller_number=r.caller_identifier or "unknown",
            state=r.state,
            created_at=r.created_at,
        )
        for r in records
    ]
