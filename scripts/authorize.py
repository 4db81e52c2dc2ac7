from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv

from morning_secretary.app.run import load_auth_config
from morning_secretary.errors import AuthFailureError
from morning_secretary.providers.auth import AuthSession


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Authorize Gmail and Calendar read access and cache the token."
    )
    parser.add_argument(
        "--port",
        dest="port",
        type=int,
        default=0,
        help="Local callback port (0 picks a free one).",
    )
    args = parser.parse_args()

    try:
        session = AuthSession(load_auth_config())
        creds = session.authorize_interactive(port=args.port)
    except (RuntimeError, AuthFailureError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        print("Setup:", file=sys.stderr)
        print("  1. Enable the Gmail and Google Calendar APIs in Google Cloud Console", file=sys.stderr)
        print("  2. Create OAuth 2.0 credentials (Desktop app)", file=sys.stderr)
        print("  3. Save them as credentials.json in the secrets directory", file=sys.stderr)
        return 1

    session.save(creds)
    print(f"[auth] Token saved to {session.config.token_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
