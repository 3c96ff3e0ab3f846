#!/usr/bin/env python3
"""
LinkedIn Login

Opens a visible browser on the LinkedIn login page and saves the session
once you have signed in, so the scraper can read LinkedIn job postings.

Usage:
    python scripts/linkedin_login.py [options]

Examples:
    python scripts/linkedin_login.py
    python scripts/linkedin_login.py --status
    python scripts/linkedin_login.py --clear
"""

import argparse
import asyncio
import sys

from sales_tracker.core.container import init_container, shutdown_container
from sales_tracker.services.linkedin_auth import (
    clear_cookies,
    has_saved_cookies,
    interactive_login,
)


async def run(args: argparse.Namespace) -> int:
    await init_container()
    try:
        if args.status:
            if await has_saved_cookies():
                print("LinkedIn session saved.")
                return 0
            print("No LinkedIn session saved. Run without --status to log in.")
            return 1

        if args.clear:
            result = await clear_cookies()
            print(result["message"])
            return 0

        print("A browser window will open. Log in to LinkedIn there.")
        result = await interactive_login()
        if result["success"]:
            print(f"{result['message']} ({result['cookieCount']} cookies)")
            return 0

        print(f"Login failed: {result['error']}", file=sys.stderr)
        return 1
    finally:
        await shutdown_container()


def main() -> None:
    parser = argparse.ArgumentParser(description="Capture a LinkedIn session for job scraping")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--status", action="store_true", help="Report whether a session is saved")
    group.add_argument("--clear", action="store_true", help="Delete the saved session")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
