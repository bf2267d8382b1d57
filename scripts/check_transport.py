#!/usr/bin/env python3
"""
Mail Transport Check Script

Run this script to verify the mail transport configuration and preview the
emails a sample nomination would produce. With --send the sample batch is
actually dispatched through the configured transport.
"""

import sys
import asyncio
import argparse
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv(project_root / ".env")

from coterie_nominations.dispatcher import DispatchError, NotificationDispatcher
from coterie_nominations.models import NominationSubmission
from coterie_nominations.transport import TransportConfig, build_transport
from coterie_nominations.validation import validate_submission


def sample_submission(nomination_type: str, recipient: str) -> NominationSubmission:
    """Build a complete sample nomination addressed to the given recipient"""
    return NominationSubmission(
        nominationType=nomination_type,
        name="Ada Lovelace",
        email=recipient,
        title="CTO",
        company="Acme",
        linkedin="https://linkedin.com/in/ada",
        community="AI",
        qualification="Built the first algorithm.",
        nominatorName="Charles Babbage" if nomination_type == "peer" else None,
        nominatorEmail=recipient if nomination_type == "peer" else None,
    )


def check_transport(nomination_type: str, recipient: str, send: bool) -> bool:
    """
    Validate configuration, print the sample batch and optionally send it

    Returns:
        bool: Success status
    """
    print("Coterie Nomination Transport Check")
    print("=" * 50)

    config = TransportConfig()
    print(f"Backend: {config.selected_backend}")
    if config.selected_backend == "smtp":
        print(f"Host: {config.smtp_host}:{config.smtp_port} (TLS: {config.smtp_use_tls})")
    print()

    print("Validating configuration...")
    is_valid, error_msg = config.validate_config()
    if not is_valid:
        print(f"Configuration Error: {error_msg}")
        print("\nSet either:")
        print("  - RESEND_API_KEY")
        print("  - SMTP_HOST (plus SMTP_PORT, SMTP_USER, SMTP_PASSWORD as needed)")
        return False
    print("Configuration valid")

    submission = sample_submission(nomination_type, recipient)
    validate_submission(submission)
    dispatcher = NotificationDispatcher(build_transport(config))

    messages = dispatcher.build_messages(submission)
    print(f"\nSample {nomination_type} nomination produces {len(messages)} emails:")
    for message in messages:
        print(f"  To: {message.to:<35} Reply-To: {message.reply_to or '-':<30} Subject: {message.subject}")

    if not send:
        print("\nDry run only. Re-run with --send to dispatch the batch.")
        return True

    print("\nSending...")
    try:
        results = asyncio.run(dispatcher.dispatch(submission))
    except DispatchError as e:
        print(f"Dispatch failed: {e}")
        return False

    for result in results:
        print(f"  {result.status.value:<6} {result.recipient} ({result.message_id})")
    return True


def main():
    parser = argparse.ArgumentParser(description="Check the nomination mail transport")
    parser.add_argument("--type", choices=["self", "peer"], default="self", help="Sample nomination type")
    parser.add_argument("--to", default="test@example.com", help="Address for the acknowledgment emails")
    parser.add_argument("--send", action="store_true", help="Actually send the sample batch")
    args = parser.parse_args()

    success = check_transport(args.type, args.to, args.send)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
