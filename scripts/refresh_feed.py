#!/usr/bin/env python3
"""One-off feed refresh (cron).

Behavior:
- Build a sync session (local store, fast cache, feed client)
- Serve cache + store, then run one feed refresh and wait for it
- User ratings in the local store are preserved

Run (local):
  python -m scripts.refresh_feed

Env vars (see top_movies/settings.py):
  TV_API_KEY, DATABASE_URL, REDIS_URL, FEED_TIMEOUT_SECONDS
"""

import asyncio
import os
import sys
from dataclasses import asdict


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from top_movies.bootstrap import build_components  # noqa: E402


async def main() -> int:
    components = build_components()
    try:
        await components.db.create_tables()
        refresh = await components.engine.activate()
        stats = await refresh

        # Final output for cron logs (single dict)
        print(
            {
                "ok": stats.ok,
                "state": components.engine.state.value,
                "refresh": asdict(stats),
                "visible": len(components.engine.visible_list()),
            }
        )
        return 0 if stats.ok else 1
    finally:
        await components.aclose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
