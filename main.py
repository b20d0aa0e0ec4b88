"""Serve the phone tutor: Twilio webhooks, the Ultravox textbook tool and call summaries."""

import uvicorn

from voice_tutor.api import create_app
from voice_tutor.config import get_settings


def main():
    """Start uvicorn on the configured host and port with the tutor app."""
    settings = get_settings()

    uvicorn.run(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
