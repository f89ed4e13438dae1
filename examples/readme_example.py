from dataclasses import dataclass, field
from typing import Any

import numpy as np

from structcopy import (
    Ptr,
    TypeNonCopyableError,
    copy,
    copy_field,
    ignore_non_copyable_types,
    to_map,
)


@dataclass
class Location:
    lat: float = 0.0
    lon: float = 0.0


@dataclass
class Reading:
    """A sensor reading: embedded location, tagged keys and an internal checksum."""

    sensor: int = copy_field("id", default=0)
    level: np.uint64 = np.uint64(0)
    location: Location = copy_field(embed=True, default_factory=Location)
    tags: list[str] = field(default_factory=list)
    raw: bytes = copy_field("-", default=b"")
    _checksum: int = copy_field("checksum", default=0)


def main() -> None:
    reading = Reading(
        sensor=7,
        level=np.uint64(200),
        location=Location(59.9, 10.7),
        tags=["roof"],
        raw=b"\x00\x01",
        _checksum=42,
    )

    # Dynamic values keep their source types; the checksum needs a reference
    print(to_map(reading))
    print(to_map(Ptr(reading)))

    # Narrow numeric mapping: 200 wraps to -56 in an int8
    dst = Ptr.to(dict[str, np.int8])
    try:
        copy(dst, reading)
    except TypeNonCopyableError as e:
        print(f"strict copy failed on {e.field}: {e}")

    dst = Ptr.to(dict[str, np.int8])
    copy(dst, reading, ignore_non_copyable_types())
    print(dst.value)

    summary: dict[str, Any] = to_map(reading, map_type=dict[str, Any])
    print(sorted(summary))


if __name__ == "__main__":
    main()
