"""
check_sheets_connection.py — Verify the Google Sheets credentials in .env.

This script:
1. Loads the .env file (backend/.env by default)
2. Authenticates with the service account
3. Prints the spreadsheet title, then every sheet with its header row

Usage:
    python scripts/check_sheets_connection.py
    python scripts/check_sheets_connection.py --env-file ../.env.staging --sheet orders
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from app.core.config import Settings
from app.data.sheets_client import (
    SheetsClient,
    SheetsClientConfigurationError,
    SheetsClientError,
    SheetsClientSettings,
)

DEFAULT_ENV_FILE = Path(__file__).parent.parent / ".env"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check the Google Sheets connection")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=DEFAULT_ENV_FILE,
        help="Path to the .env file to load (default: backend/.env)",
    )
    parser.add_argument(
        "--sheet",
        action="append",
        dest="sheets",
        help="Only show this sheet (repeatable)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.env_file.exists():
        load_dotenv(args.env_file, override=True)
        print(f"Loaded {args.env_file}")
    else:
        print(f"WARNING: {args.env_file} not found, using the process environment")

    app_settings = Settings()
    config = SheetsClientSettings(
        spreadsheet_id=app_settings.GOOGLE_SPREADSHEET_ID,
        client_email=app_settings.GOOGLE_SHEETS_CLIENT_EMAIL,
        private_key=app_settings.GOOGLE_SHEETS_PRIVATE_KEY,
        timeout_seconds=app_settings.GOOGLE_SHEETS_TIMEOUT_SECONDS,
    )

    try:
        client = SheetsClient(config=config)
        info = client.get_spreadsheet_info()
    except SheetsClientConfigurationError as e:
        print(f"ERROR: {e}")
        return 2
    except SheetsClientError as e:
        print(f"ERROR: Could not reach the spreadsheet: {e}")
        return 1

    print(f"✓ Connected to spreadsheet: {info.get('properties', {}).get('title', '?')}")
    print(f"  Service account: {config.client_email}")

    titles = [sheet["properties"]["title"] for sheet in info.get("sheets", [])]
    for title in titles:
        if args.sheets and title not in args.sheets:
            continue
        try:
            table = client.read_table(title)
        except SheetsClientError as e:
            print(f"  - {title}: ERROR {e}")
            continue
        print(f"  - {title} ({len(table.rows)} rows)")
        print(f"      columns: {', '.join(table.header) or '(no header row)'}")

    missing = sorted(set(args.sheets or []) - set(titles))
    for title in missing:
        print(f"  - {title}: not found in the spreadsheet")
    return 1 if missing else 0


if __name__ == "__main__":
    sys.exit(main())
