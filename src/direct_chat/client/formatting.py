from __future__ import annotations

from datetime import datetime, tzinfo


def format_message_time(ts: datetime, tz: tzinfo | None = None) -> str:
    """24-hour ``HH:MM`` in ``tz`` (local time when omitted)."""
    return ts.astimezone(tz).strftime("%H:%M")
