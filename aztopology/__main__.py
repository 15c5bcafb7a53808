"""Entry point for `python -m aztopology`.

Usage:
    python -m aztopology
    uv run python -m aztopology
"""

from __future__ import annotations

import asyncio

from aztopology.app import main

asyncio.run(main())
