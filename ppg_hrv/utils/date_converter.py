from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from .. import config


def get_local_tz(tz_name=None):
    return ZoneInfo(tz_name or config.TIME_ZONE)


def epoch_ms_to_iso(value, tz_name=None):
    if value in (None, "", 0):
        return None
    try:
        ms = int(value)
    except (TypeError, ValueError):
        return None
    # assume ms since Unix epoch in UTC
    dt_utc = datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
    dt_local = dt_utc.astimezone(get_local_tz(tz_name))
    return dt_local.isoformat(timespec="milliseconds")


def iso_to_epoch_ms(data, tz_name=None):

    if data in (None, ""):
        return None

    try:
        return int(data)
    except (TypeError, ValueError):
        pass

    try:
        dt = datetime.fromisoformat(str(data))
    except ValueError:
        raise ValueError(f"Invalid datetime format: {data!r}") from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=get_local_tz(tz_name))
    dt_utc = dt.astimezone(timezone.utc)

    return int(round(dt_utc.timestamp() * 1000))
