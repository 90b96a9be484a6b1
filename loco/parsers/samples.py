"""
Recorded-sample parser: read a CSV of location and accelerometer samples.

Expected header (extra columns are ignored)::

    kind,ts,lat,lon,accuracy,x,y,z

`kind` is `location` (uses ts, lat, lon and optional accuracy) or
`acceleration` (uses ts, x, y, z). Timestamps are epoch milliseconds.
"""

import csv
from pathlib import Path
from typing import Iterator, Optional, Union

from pydantic import ValidationError

from loco.errors import ReplayFormatError
from loco.utils.validate import AccelerationSample, Coordinate, LocationSample

Sample = Union[LocationSample, AccelerationSample]

REQUIRED_COLUMNS = ("kind", "ts")


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


def parse_row(row: dict[str, str], line: int) -> Sample:
    """
    Convert one CSV row into a sample.

    Raises
    ------
    ReplayFormatError
        If the kind is unknown or a field is missing or invalid.
    """
    kind = (row.get("kind") or "").strip().lower()
    try:
        ts = int(row["ts"])
        if kind == "location":
            return LocationSample(
                ts=ts,
                coordinate=Coordinate(lat=float(row["lat"]), lon=float(row["lon"])),
                accuracy=_optional_float(row.get("accuracy")),
            )
        if kind == "acceleration":
            return AccelerationSample(
                ts=ts, x=float(row["x"]), y=float(row["y"]), z=float(row["z"])
            )
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        raise ReplayFormatError(line, f"invalid {kind or 'sample'} row: {e}") from e
    raise ReplayFormatError(line, f"unknown sample kind {row.get('kind')!r}")


def iter_samples(path: Union[str, Path]) -> Iterator[Sample]:
    """
    Yield samples from a recorded CSV file in file order.
    """
    with Path(path).open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or ())]
        if missing:
            raise ReplayFormatError(1, f"missing columns: {', '.join(missing)}")
        for row in reader:
            # header is line 1
            yield parse_row(row, reader.line_num)


def load_samples(path: Union[str, Path]) -> list[Sample]:
    """
    Load every sample of a recorded file, ordered by timestamp.

    Samples sharing a timestamp keep their file order.
    """
    return sorted(iter_samples(path), key=lambda s: s.ts)
