#!/usr/bin/env python3
"""
Print a bearer token for an existing user.

Usage:
    python create_token.py --email alice@gmail.com --days 365
"""

import argparse
import sys

from meetup_api.app.core.db import get_connection, init_db
from meetup_api.app.core.security import create_access_token


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue an access token for a user.")
    ap.add_argument("--email", required=True, help="Email of the user")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days")
    args = ap.parse_args()

    init_db()
    conn = get_connection()
    try:
        row = conn.execute("SELECT id FROM users WHERE email = ?", (args.email.lower(),)).fetchone()
    finally:
        conn.close()
    if not row:
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        sys.exit(2)
    print(create_access_token({"sub": row["id"]}, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
