import logging

import pandas as pd

from ..models import RawSample

logger = logging.getLogger(__name__)

# layout of headerless exports; headed files are matched by column name
POSITIONAL_COLUMNS = ("time", "cnt", "ir", "red", "green", "spo2", "hr", "temp")

NUMERIC_COLUMNS = ("timestamp", "start_time", "ir", "red", "green", "spo2", "hr", "temp", "battery")
COLUMN_ALIASES = {"starttime": "start_time", "device_mac": "device_mac_address"}


def _looks_like_header(row) -> bool:
    text = ",".join(str(v) for v in row if isinstance(v, str)).lower()
    return "time" in text or "ir" in text


def _positional_names(width):
    names = list(POSITIONAL_COLUMNS[:width])
    names += [f"extra_{i}" for i in range(len(names), width)]
    return names


def read_recording(source) -> pd.DataFrame:
    raw = pd.read_csv(source, header=None, dtype=str, skip_blank_lines=True,
                      skipinitialspace=True)
    if raw.empty:
        raise ValueError("Recording is empty.")

    if _looks_like_header(raw.iloc[0].tolist()):
        names = [str(c).strip().lower() for c in raw.iloc[0].tolist()]
        df = raw.iloc[1:].reset_index(drop=True)
    else:
        names = _positional_names(raw.shape[1])
        df = raw
    df.columns = [COLUMN_ALIASES.get(n, n) for n in names]

    if "ir" not in df.columns:
        raise ValueError(f"Recording has no IR column (columns: {', '.join(df.columns)})")

    # clock-style "time" values coerce to NaN and are left out
    if "timestamp" not in df.columns and "time" in df.columns:
        df["timestamp"] = df["time"]

    for col in NUMERIC_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    valid = df["ir"].notna() & (df["ir"] > 0)
    dropped = int((~valid).sum())
    if dropped:
        logger.warning("Dropped %d of %d recording rows without a usable IR value", dropped, len(df))

    return df[valid].reset_index(drop=True)


def _cell(value):
    return None if pd.isna(value) else value


def samples_from_frame(df: pd.DataFrame):
    fields = [f for f in RawSample.model_fields if f in df.columns]
    samples = []
    for rec in df[fields].to_dict("records"):
        values = {k: _cell(v) for k, v in rec.items()}
        for key in ("timestamp", "start_time"):
            if values.get(key) is not None:
                values[key] = int(values[key])
        if values.get("device_mac_address") is not None:
            values["device_mac_address"] = str(values["device_mac_address"]).strip()
        samples.append(RawSample(**values))

    return samples


def read_samples(source):
    return samples_from_frame(read_recording(source))
