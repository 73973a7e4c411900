#!/usr/bin/env python3
"""
Reset a user's password in the Meetup SQLite database.

This script does not read or reveal any existing password.  It stores a
fresh salted hash (``v2.<salt>.<hash>``) for the given email.

Usage:
    python reset_password.py --db ./meetup.db --email alice@gmail.com --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import os
import sqlite3
import sys

from meetup_api.app.core.db import utcnow
from meetup_api.app.core.security import hash_password


def main() -> None:
    ap = argparse.ArgumentParser(description="Reset a Meetup user's password (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./meetup.db)")
    ap.add_argument("--email", required=True, help="User email to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args()

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        sys.exit(1)

    conn = sqlite3.connect(args.db)
    try:
        cur = conn.cursor()
        cur.execute(
            "UPDATE users SET password = ?, updated_at = ? WHERE email = ?",
            (hash_password(new_password), utcnow(), args.email.lower()),
        )
        if cur.rowcount == 0:
            print(f"[!] No user found with email: {args.email}", file=sys.stderr)
            sys.exit(2)
        conn.commit()
        print(f"[+] Password updated for user: {args.email}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
