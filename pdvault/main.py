"""
Command line entry point for the Personal Data Vault security core.

Inspects and edits the local data directory: the security log, secure notes
and sessions.
"""

import sys
import logging
import argparse
from typing import List, Optional

from pdvault import config
from pdvault.models import LogStatus, LogType
from pdvault.service import SecurityService
from pdvault.storage import StorageError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdvault", description=f"{config.APP_NAME} v{config.APP_VERSION}")
    parser.add_argument("--data-dir", help="Directory holding the vault data (default: ~/%s)" % config.CONFIG_DIR_NAME)
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    logs = sub.add_parser("logs", help="Show the security log, newest first")
    logs.add_argument("--type", choices=[t.value for t in LogType])
    logs.add_argument("--status", choices=[s.value for s in LogStatus])
    logs.add_argument("--limit", type=int, default=20)

    sub.add_parser("notes", help="List secure notes")

    note_add = sub.add_parser("note-add", help="Create a secure note")
    note_add.add_argument("title")
    note_add.add_argument("content")
    note_add.add_argument("--tag", action="append", default=[], dest="tags")

    note_show = sub.add_parser("note-show", help="Show a secure note with its content decrypted")
    note_show.add_argument("note_id")

    note_rm = sub.add_parser("note-rm", help="Delete a secure note")
    note_rm.add_argument("note_id")

    sub.add_parser("sessions", help="List sessions")
    return parser


def run(service: SecurityService, args: argparse.Namespace) -> int:
    """Execute one parsed command against service. Returns the exit status."""
    if args.command == "logs":
        for entry in service.log.get_security_logs(type=args.type, status=args.status, limit=args.limit):
            print(f"{entry.timestamp} | {entry.type.value} | {entry.status.value} | {entry.details}")

    elif args.command == "notes":
        for note in service.notes.get_secure_notes():
            tags = ", ".join(note.tags)
            print(f"{note.id}  {note.title}" + (f"  [{tags}]" if tags else ""))

    elif args.command == "note-add":
        note = service.notes.create_secure_note(args.title, args.content, args.tags)
        print(note.id)

    elif args.command == "note-show":
        note = service.notes.get_secure_note(args.note_id)
        if note is None:
            print(f"No note with id {args.note_id}", file=sys.stderr)
            return 1
        if note.content is None:
            print(f"Note {args.note_id} could not be decrypted", file=sys.stderr)
            return 1
        print(note.title)
        print(note.content)

    elif args.command == "note-rm":
        if not service.notes.delete_secure_note(args.note_id):
            print(f"No note with id {args.note_id}", file=sys.stderr)
            return 1

    elif args.command == "sessions":
        for session in service.sessions.get_sessions():
            state = "active" if session.is_active else "inactive"
            print(f"{session.id}  {session.user_id}  {state}  expires {session.expires_at}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')

    try:
        service = SecurityService.open(args.data_dir)
        return run(service, args)
    except StorageError as e:
        logger.debug("Storage failure", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
