#!/usr/bin/env python
"""
Concurrent Submissions Example

Logs two accounts in and submits the same code for both at once. Each
operation launches its own browser; only the session file is shared.

Usage:
    python examples/concurrent_submissions.py CODE

Requirements:
    - ALICE_PASSWORD and BOB_PASSWORD environment variables set
    - Game code agent installed: pip install -e .
    - Browsers installed: playwright install chromium
"""

import asyncio
import os
import sys

from gamecode_agent.config import configure_logging
from gamecode_agent.service import create_service, generate_session_id


async def main(code: str) -> None:
    """Log both accounts in, then submit code for both concurrently."""
    configure_logging()
    service = create_service()

    accounts = {
        "alice": os.environ["ALICE_PASSWORD"],
        "bob": os.environ["BOB_PASSWORD"],
    }
    session_ids = {name: generate_session_id() for name in accounts}

    logins = await asyncio.gather(*(
        service.login(name, password, session_ids[name])
        for name, password in accounts.items()
    ))
    for name, response in zip(accounts, logins):
        print(f"{name}: login {response.status_code} {response.body}")

    submissions = await asyncio.gather(*(
        service.submit_code(code, session_ids[name])
        for name, response in zip(accounts, logins)
        if response.ok
    ))
    for response in submissions:
        print(f"submit {response.status_code}: {response.body.get('message')}")
        for message in response.body.get("messages", []):
            print(f"  [{message['type']}] {message['text']}")

    for session_id in session_ids.values():
        service.logout(session_id)


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    asyncio.run(main(sys.argv[1]))
