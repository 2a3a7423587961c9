#!/usr/bin/env python3
"""Main entry point for Type 5 (ISO15693) NDEF tag operations."""

import logging
import argparse

from src.type5.channel import PCSCChannel, list_readers
from src.type5.exceptions import Type5Error
from src.type5.session import Type5Session
from src.utils.hexcodec import build_url_with_uid, reverse_hex_to_decimal
from src.utils.logging import setup_logging


def handle_list_readers(args):
    """List the available PC/SC readers."""
    names = list_readers()
    if not names:
        return False
    logging.info("Available NFC Readers:")
    for index, name in enumerate(names):
        logging.info(f" [{index}] {name}")
    return True


def target_url(session: Type5Session, args) -> str:
    """URL to write, with the tag UID appended when requested."""
    if not args.append_uid:
        return args.url
    result = session.read_uid()
    return build_url_with_uid(args.url, result.value if result else "")


def handle_tag_operation(args):
    """Handle operations that talk to a tag."""
    with PCSCChannel(args.reader).connect() as channel:
        session = Type5Session(channel, strict_cc=args.strict_cc)

        if args.command == 'uid':
            result = session.read_uid()
            if result and args.reverse:
                reversed_hex, value = reverse_hex_to_decimal(result.value)
                logging.info(f"Reversed UID: {reversed_hex}")
                logging.info(f"Decimal UID:  {value}")

        elif args.command == 'read':
            result = session.read_tag()
            if result:
                uid, records = result.value
                logging.info(f"UID: {uid}")
                for index, record in enumerate(records, 1):
                    logging.info(f"  Record {index}: {record}")

        elif args.command == 'write':
            result = session.format_and_write(target_url(session, args))

        elif args.command == 'overwrite':
            result = session.overwrite_in_place(target_url(session, args))

        elif args.command == 'format':
            result = session.format_empty()

        elif args.command == 'test-block':
            result = session.write_read_check(args.block)

        else:
            raise ValueError(f"Unknown command: {args.command}")

    if result:
        logging.info(f"{args.command}: {result.message}")
    else:
        logging.error(f"{args.command} failed ({result.kind}): {result.message}")
    return result.ok


def create_parser():
    """Create argument parser."""
    parser = argparse.ArgumentParser(description='Type 5 (ISO15693) NDEF tag operations')
    parser.add_argument('--reader', '-r',
                        help='Reader index or part of its name (default: first reader)')
    parser.add_argument('--strict-cc', action='store_true',
                        help='Reject memory that does not start with a valid capability container')
    parser.add_argument('--verbose', action='store_true',
                        help='Show APDU traces on the console')
    parser.add_argument('--log-dir', default='output',
                        help='Directory for the session log (default: output)')
    subparsers = parser.add_subparsers(dest='command')

    url_args = argparse.ArgumentParser(add_help=False)
    url_args.add_argument('--url', '-u', required=True, help='URL to store on the tag')
    url_args.add_argument('--append-uid', action='store_true',
                          help='Append the tag UID as a uid= query parameter')

    subparsers.add_parser('readers', help='List PC/SC readers')

    uid_parser = subparsers.add_parser('uid', help='Read tag UID')
    uid_parser.add_argument('--reverse', action='store_true',
                            help='Also show the byte-reversed UID and its decimal value')

    subparsers.add_parser('read', help='Read NDEF records from the tag')
    subparsers.add_parser('write', parents=[url_args],
                          help='Format the tag and write a URL (overwrites the CC)')
    subparsers.add_parser('overwrite', parents=[url_args],
                          help='Replace the NDEF message of a formatted tag in place')
    subparsers.add_parser('format', help='Format the tag with an empty NDEF record')

    test_parser = subparsers.add_parser('test-block',
                                        help='Write a test pattern to a block and read it back')
    test_parser.add_argument('--block', '-b', type=int, required=True,
                             help='Block number (its content is destroyed)')

    return parser


def validate_args(args):
    """Validate command line arguments."""
    if not args.command:
        return False, "No command specified"

    if args.command in ('write', 'overwrite') and not args.url:
        return False, "URL is required"

    if args.command == 'test-block' and not 0 <= args.block <= 0xFF:
        return False, f"Block number out of range: {args.block}"

    return True, ""


def main():
    parser = create_parser()
    args = parser.parse_args()

    valid, error = validate_args(args)
    if not valid:
        if error:
            print(f"Error: {error}")
        parser.print_help()
        return 2

    setup_logging(args.log_dir, verbose=args.verbose)

    try:
        if args.command == 'readers':
            ok = handle_list_readers(args)
        else:
            ok = handle_tag_operation(args)
    except Type5Error as e:
        logging.error(f"Operation failed: {e}")
        ok = False
    except KeyboardInterrupt:
        logging.info("Operation stopped by user")
        ok = False

    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
