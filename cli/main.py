"""Main CLI entry point for mailarchive."""

import argparse
import sys
from email import message_from_bytes
from email.policy import default
from pathlib import Path
from typing import List, Optional

from mailarchive.config.config_loader import ConfigLoader
from mailarchive.errors import ArchiveError, ConfigError
from mailarchive.monitoring.logger import initialize_logging
from mailarchive.services.archive.archive_service import EmailArchiveService
from mailarchive.services.normalizer.message_source import (
    EmailMessageSource,
    Envelope,
    MessageSource,
    RawMessageSource,
)
from mailarchive.storage.archive_store import ArchiveStore


def load_source(path: Path, envelope: Optional[Envelope], parse: bool) -> MessageSource:
    """
    Read an .eml file as a message source.

    Args:
        path: Path to the .eml file
        envelope: Optional envelope to attach
        parse: Use the stdlib object model instead of raw bytes
    """
    raw = path.read_bytes()
    if parse:
        return EmailMessageSource(message_from_bytes(raw, policy=default), envelope)
    return RawMessageSource(raw, envelope)


def archive_files(
    email_paths: List[Path],
    config_path: Optional[Path] = None,
    transport: Optional[str] = None,
    sender: Optional[str] = None,
    recipients: Optional[List[str]] = None,
    parse: bool = False,
) -> int:
    """
    Archive .eml files and print one result line per file.

    Args:
        email_paths: Files to archive
        config_path: Optional custom config file path
        transport: Transport name to record
        sender: Envelope sender
        recipients: Envelope recipients
        parse: Use the object-model source

    Returns:
        Number of files that could not be archived
    """
    config = ConfigLoader(config_path).load()
    initialize_logging(config.get_log_dir())
    service = EmailArchiveService.from_config(config)

    envelope = None
    if sender or recipients:
        envelope = Envelope(sender=sender, recipients=tuple(recipients or ()))

    failures = 0
    for email_path in email_paths:
        try:
            source = load_source(email_path, envelope, parse)
            archive_id = service.archive_sent(source, transport=transport)
        except (OSError, ArchiveError) as e:
            print(f"{email_path}: error: {e}", file=sys.stderr)
            failures += 1
            continue

        print(f"{email_path}: {archive_id or 'skipped'}")

    return failures


def cmd_init(args) -> int:
    """Initialize archive root command."""
    try:
        config = ConfigLoader(args.config).load()
        store = ArchiveStore(config.get_archive_root())
        store.ensure_root()
    except ArchiveError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"Archive root initialized at: {store.root}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="mailarchive - archive outgoing email on disk")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    archive_parser = subparsers.add_parser("archive", help="Archive .eml files")
    archive_parser.add_argument("emails", nargs="+", type=Path, help="Email file(s) to archive")
    archive_parser.add_argument("--config", type=Path, help="Custom config file path")
    archive_parser.add_argument("--transport", help="Transport name to record")
    archive_parser.add_argument("--sender", help="Envelope sender address")
    archive_parser.add_argument(
        "--recipient", action="append", dest="recipients", help="Envelope recipient (repeatable)"
    )
    archive_parser.add_argument(
        "--parse", action="store_true", help="Parse with the email object model instead of raw bytes"
    )

    init_parser = subparsers.add_parser("init", help="Initialize the archive root")
    init_parser.add_argument("--config", type=Path, help="Custom config file path")

    args = parser.parse_args(argv)

    if args.command == "archive":
        try:
            failures = archive_files(
                args.emails,
                config_path=args.config,
                transport=args.transport,
                sender=args.sender,
                recipients=args.recipients,
                parse=args.parse,
            )
        except ConfigError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        return 1 if failures else 0
    if args.command == "init":
        return cmd_init(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
