from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from morning_secretary.app.run import load_auth_config
from morning_secretary.errors import ErrorKind, classify_error, describe_error
from morning_secretary.parsing.normalize import header_value, normalize_message
from morning_secretary.pipeline.retry import RetryPolicy
from morning_secretary.providers.auth import AuthSession
from morning_secretary.providers.gmail import GmailClient

SUMMARY_HEADERS = ["From", "Subject", "Date"]


def print_summaries(client: GmailClient, retry: RetryPolicy, query: str, count: int, title: str) -> None:
    ids = retry.execute(lambda: client.list_messages(query=query, max_results=count), label="gmail list")
    if not ids:
        print("No emails found.")
        return

    print(f"--- {title} ({len(ids)}) ---\n")
    for mid in ids:
        msg = retry.execute(
            lambda mid=mid: client.get_message(mid, fmt="metadata", metadata_headers=SUMMARY_HEADERS),
            label=f"gmail get {mid}",
        )
        mail = normalize_message(msg)
        print(f"  ID: {mail.id}")
        print(f"  From: {mail.from_}")
        print(f"  Subject: {mail.subject}")
        print(f"  Date: {mail.date}")
        print(f"  Snippet: {mail.snippet}")
        print("")


def print_message(client: GmailClient, retry: RetryPolicy, message_id: str) -> None:
    msg = retry.execute(lambda: client.get_message(message_id, fmt="full"), label="gmail get")
    mail = normalize_message(msg)
    headers = (msg.get("payload") or {}).get("headers")

    print("--- Email Details ---\n")
    print(f"From: {mail.from_}")
    print(f"To: {header_value(headers, 'To')}")
    print(f"Subject: {mail.subject}")
    print(f"Date: {mail.date}")
    print(f"ID: {mail.id}")
    print(f"Labels: {', '.join(msg.get('labelIds') or [])}")
    print("\n--- Body ---\n")
    print(mail.body)


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Read and search Gmail messages.")
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List recent messages.")
    list_cmd.add_argument("--count", type=int, default=10, help="Number of messages (default: 10).")

    read_cmd = sub.add_parser("read", help="Print a message body by ID.")
    read_cmd.add_argument("message_id")

    search_cmd = sub.add_parser("search", help="Search with Gmail query syntax.")
    search_cmd.add_argument("query", nargs="+")

    sub.add_parser("unread", help="List unread messages.")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    retry = RetryPolicy()
    try:
        session = AuthSession(load_auth_config())
        creds, refreshed = session.ensure_valid()
        if refreshed:
            session.save(creds)
        client = GmailClient(creds)
        client.connect()

        if args.command == "list":
            print_summaries(client, retry, "", max(1, args.count), "Latest Emails")
        elif args.command == "read":
            print_message(client, retry, args.message_id)
        elif args.command == "search":
            query = " ".join(args.query)
            print_summaries(client, retry, query, 20, f'Search Results for "{query}"')
        elif args.command == "unread":
            print_summaries(client, retry, "is:unread", 20, "Unread Emails")
    except RuntimeError as exc:
        # Missing credentials or a rejected token.
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        if classify_error(exc) is ErrorKind.OTHER:
            raise
        print(f"[ERROR] {describe_error(exc)}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
