#!/usr/bin/env python
"""Demo script to ingest a sample textbook excerpt for testing."""

import asyncio
import sys
from pathlib import Path

from voice_tutor.api.dependencies import build_services
from voice_tutor.config import get_settings
from voice_tutor.rag.ingest import IngestionError

SAMPLE_TEXTBOOK = """
Chapter 7: ICT Security and Ethical Use

Security Threats. A computer virus is a malicious program that copies itself and spreads
from one computer to another. It can damage or delete files and slow down the computer.
Malware is any software designed to harm computers. Phishing tricks users into revealing
their passwords by pretending to be a legitimate website. Password hacking tries to guess
or steal login credentials. Data theft steals personal or sensitive information.

Protection Methods. Install antivirus software and keep it updated. Use strong passwords
that mix letters, numbers and symbols. Enable two-factor authentication when it is
available. Do not click suspicious links or download files from unknown sources. Keep the
operating system updated and be careful when using public wifi.

Firewalls. A firewall monitors the traffic coming into and going out of a network and
blocks connections that break its security rules. Home routers usually include a simple
firewall. Organisations use dedicated firewalls to separate their internal network from
the Internet.

Cyber Ethics. Use social media responsibly without spreading rumours or hate. Respect the
privacy of others and do not share their information without permission. Avoid
plagiarism by giving credit to the original authors. Online actions have real
consequences, and the ICT Act of Bangladesh makes hacking and online harassment
punishable offences.
"""


async def main(paths: list[str]):
    """Ingest the given files, or the built-in sample when none are given."""
    print("Voice Tutor Demo Data Ingestion")
    print("=" * 50)

    services = build_services(get_settings())

    try:
        if not paths:
            result = await services.ingester.ingest_text(SAMPLE_TEXTBOOK, "ict_chapter_7.md")
            print(f"Created {result.chunks_created} chunks for {result.source_name} ({result.document_id})")
        for path in map(Path, paths):
            result = await services.ingester.ingest_bytes(path.read_bytes(), path.name)
            print(f"Created {result.chunks_created} chunks for {path.name} ({result.document_id})")
    except IngestionError as e:
        print(f"Ingestion failed: {e}")
        sys.exit(1)

    print(f"Index now holds {services.index.count()} passages in {services.settings.corpus_path}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
