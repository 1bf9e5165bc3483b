"""Wall-clock helpers."""

import pendulum


def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return int(pendulum.now("UTC").timestamp() * 1000)


def humanize_ms(timestamp_ms: int) -> str:
    """Render an epoch-millisecond timestamp relative to now ("3 hours ago")."""
    return pendulum.from_timestamp(timestamp_ms / 1000, tz="UTC").diff_for_humans()
