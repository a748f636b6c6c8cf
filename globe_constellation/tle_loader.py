"""
Element Set Loader Module

Parses raw three-line element text (name line, element line 1, element line 2)
into immutable orbital element sets for the constellation visualization.

Loading is tolerant by construction: a malformed triplet is logged and skipped,
and an unavailable or empty source yields an empty collection. Downstream
components treat an empty collection as a valid, empty point cloud.

Tolerance threshold:
    Records are accepted when line 1 starts with "1", line 2 starts with "2",
    both carry the same catalog number and the numeric fields parse and
    initialise SGP4. The checksum column is verified and recorded on the element
    set, but a checksum mismatch alone does not reject the record.
"""

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sgp4.api import Satrec

from globe_constellation.logging_config import get_logger

logger = get_logger(__name__)

# Space-track 3LE name lines carry a leading "0 " designation marker
_NAME_MARKER = re.compile(r"^0\s+")


class TLEFormatError(ValueError):
    """Raised when a single element set triplet cannot be parsed."""


class ElementSetSourceError(RuntimeError):
    """Raised when the raw element set text cannot be read."""


class OrbitalElementSet(BaseModel):
    """Classical orbital elements parsed from one two-line element set."""

    model_config = ConfigDict(frozen=True)

    name: str
    catalog_number: str = Field(min_length=1, max_length=5)
    classification: str = "U"
    epoch: datetime
    inclination_deg: float = Field(ge=0.0, le=180.0)
    raan_deg: float
    eccentricity: float = Field(ge=0.0, lt=1.0)
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float = Field(gt=0.0)
    bstar: float = 0.0
    line1: str
    line2: str
    checksum_valid: bool = True


def tle_checksum(line: str) -> int:
    """Calculate the modulo-10 checksum over the first 68 columns of a TLE line."""
    checksum = 0
    for char in line[:68]:
        if char.isdigit():
            checksum += int(char)
        elif char == "-":
            checksum += 1
    return checksum % 10


def has_valid_checksum(line: str) -> bool:
    """Check the checksum digit in column 69 against the computed one."""
    if len(line) < 69 or not line[68].isdigit():
        return False
    return int(line[68]) == tle_checksum(line)


def epoch_to_datetime(epoch_year: int, epoch_days: float) -> datetime:
    """
    Convert a TLE epoch to a UTC datetime.

    Args:
        epoch_year: Two-digit year (57-99 map to 19xx, 00-56 to 20xx)
        epoch_days: Day of year with fractional part (day 1 is Jan 1)

    Returns:
        Timezone-aware datetime in UTC
    """
    year = 1900 + epoch_year if epoch_year >= 57 else 2000 + epoch_year
    return datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=epoch_days - 1.0)


def _parse_implied_exponent(field: str) -> float:
    """Parse TLE exponential notation such as ' 21844-3' (0.21844e-3)."""
    text = field.strip()
    if not text:
        return 0.0

    sign = ""
    if text[0] in "+-":
        sign, text = ("-" if text[0] == "-" else ""), text[1:]

    mantissa, exponent = text[:-2], text[-2:]
    return float(f"{sign}0.{mantissa}e{exponent}")


def clean_name(raw_name: str) -> str:
    """Strip whitespace and the leading '0 ' designation marker from a name line."""
    return _NAME_MARKER.sub("", raw_name.strip())


def parse_element_set(name: str, line1: str, line2: str) -> OrbitalElementSet:
    """
    Parse one name/line1/line2 triplet.

    Args:
        name: Satellite name line (designation marker allowed)
        line1: First element line
        line2: Second element line

    Returns:
        OrbitalElementSet

    Raises:
        TLEFormatError: If the triplet is malformed or rejected by SGP4
    """
    line1 = line1.strip()
    line2 = line2.strip()

    if not line1.startswith("1") or not line2.startswith("2"):
        raise TLEFormatError("line type markers must be '1' and '2'")

    catalog_1 = line1[2:7].strip()
    catalog_2 = line2[2:7].strip()
    if not catalog_1 or catalog_1 != catalog_2:
        raise TLEFormatError(f"catalog numbers differ: {catalog_1!r} != {catalog_2!r}")

    try:
        element_set = OrbitalElementSet(
            name=clean_name(name) or f"SAT_{catalog_1}",
            catalog_number=catalog_1,
            classification=line1[7:8].strip() or "U",
            epoch=epoch_to_datetime(int(line1[18:20]), float(line1[20:32])),
            inclination_deg=float(line2[8:16]),
            raan_deg=float(line2[17:25]),
            eccentricity=float("0." + line2[26:33].strip()),
            arg_perigee_deg=float(line2[34:42]),
            mean_anomaly_deg=float(line2[43:51]),
            mean_motion_rev_per_day=float(line2[52:63]),
            bstar=_parse_implied_exponent(line1[53:61]),
            line1=line1,
            line2=line2,
            checksum_valid=has_valid_checksum(line1) and has_valid_checksum(line2),
        )
    except (ValueError, ValidationError) as e:
        raise TLEFormatError(f"invalid element fields: {e}") from e

    satellite = Satrec.twoline2rv(line1, line2)
    if satellite.error != 0:
        raise TLEFormatError(f"SGP4 initialisation failed with error {satellite.error}")

    if not element_set.checksum_valid:
        logger.debug("Checksum mismatch tolerated", catalog_number=catalog_1)

    return element_set


def parse_element_sets(raw_text: str, max_satellites: int = 0) -> Tuple[OrbitalElementSet, ...]:
    """
    Parse newline-delimited name/line1/line2 triplets.

    Malformed triplets are skipped; this function never raises on bad data.

    Args:
        raw_text: Element set text
        max_satellites: Stop after this many accepted sets (0 = unlimited)

    Returns:
        Tuple of accepted element sets, in input order
    """
    lines = [line.strip() for line in raw_text.splitlines() if line.strip()]
    element_sets: List[OrbitalElementSet] = []
    skipped = 0

    for i in range(0, len(lines) - 2, 3):
        name, line1, line2 = lines[i], lines[i + 1], lines[i + 2]
        try:
            element_sets.append(parse_element_set(name, line1, line2))
        except TLEFormatError as e:
            skipped += 1
            logger.debug("Skipping element set", name=clean_name(name), reason=str(e))
            continue

        if max_satellites and len(element_sets) >= max_satellites:
            logger.info("Satellite limit reached", limit=max_satellites)
            break

    if skipped:
        logger.info("Malformed element sets skipped", skipped=skipped)

    return tuple(element_sets)


class ElementSetSource:
    """
    Raw element set text from a local file or an http(s) URL.

    The text is read once per session; callers run `read_text` off the frame
    loop because a remote fetch may block for up to `timeout` seconds.
    """

    def __init__(self, location: str, timeout: float = 30.0):
        self.location = location
        self.timeout = timeout

    @property
    def is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))

    def read_text(self) -> str:
        """
        Read the raw element set text.

        Raises:
            ElementSetSourceError: If the file or URL cannot be read or decoded
        """
        if self.is_remote:
            try:
                response = requests.get(self.location, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise ElementSetSourceError(f"Failed to fetch {self.location}: {e}") from e
            return response.text

        try:
            return Path(self.location).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ElementSetSourceError(f"Failed to read {self.location}: {e}") from e


def load_element_sets(
    source: ElementSetSource, max_satellites: int = 0
) -> Tuple[OrbitalElementSet, ...]:
    """
    Read and parse all element sets from a source.

    An empty source yields an empty tuple. Only the read itself may raise
    (ElementSetSourceError); malformed records never do.
    """
    logger.info("Loading element sets", source=source.location)
    raw_text = source.read_text()

    if not raw_text.strip():
        logger.warning("Element set source is empty", source=source.location)
        return ()

    element_sets = parse_element_sets(raw_text, max_satellites)
    logger.info("Element sets loaded", count=len(element_sets), source=source.location)
    return element_sets


def find_element_set(
    element_sets: Tuple[OrbitalElementSet, ...], catalog_number: str
) -> Optional[OrbitalElementSet]:
    """Look up an element set by catalog number."""
    wanted = catalog_number.strip().lstrip("0") or "0"
    for element_set in element_sets:
        if (element_set.catalog_number.lstrip("0") or "0") == wanted:
            return element_set
    return None
