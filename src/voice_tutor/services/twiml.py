"""TwiML call-control responses."""

from twilio.twiml.voice_response import Connect, VoiceResponse

APOLOGY_MESSAGE = (
    "We're sorry, but we're experiencing technical difficulties. "
    "Please try again later."
)

STREAM_ENDED_PATH = "/api/twilio/stream-ended"


def connect_stream(join_url: str, base_url: str) -> str:
    """Bridge the call's audio to ``join_url``; Twilio calls back when the stream ends."""
    connect = Connect(action=f"{base_url}{STREAM_ENDED_PATH}")
    connect.stream(url=join_url)
    response = VoiceResponse()
    response.append(connect)
    return response.to_xml()


def apology_and_hangup() -> str:
    response = VoiceResponse()
    response.say(APOLOGY_MESSAGE)
    response.hangup()
    return response.to_xml()


def hangup() -> str:
    response = VoiceResponse()
    response.hangup()
    return response.to_xml()
