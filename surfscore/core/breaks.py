"""Surf break model and database loader.

Loads break definitions from breaks.yaml and provides a clean interface
for accessing break properties and filtering breaks.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from surfscore.core.scorer import BreakInfo


BREAK_TYPES = ("beach", "reef", "point")


@dataclass
class Coordinates:
    """Geographic coordinates."""
    lat: float
    lon: float


@dataclass
class SurfBreak:
    """Complete surf break model."""
    id: str
    name: str
    region: str
    coordinates: Coordinates
    break_type: str  # beach, reef, point
    orientation_deg: int
    optimal_swell_dir_min: int
    optimal_swell_dir_max: int
    optimal_tide_low: float
    optimal_tide_high: float
    optimal_wind_dir: str = ""  # compass point, display only
    exposure_factor: Optional[float] = None
    nearest_tide_station: Optional[str] = None
    nearest_buoy_station: Optional[str] = None
    webcam_url: Optional[str] = None

    @property
    def break_info(self) -> BreakInfo:
        """Scoring reference data for this break."""
        return BreakInfo(
            orientation_deg=self.orientation_deg,
            optimal_swell_dir_min=self.optimal_swell_dir_min,
            optimal_swell_dir_max=self.optimal_swell_dir_max,
            optimal_tide_low=self.optimal_tide_low,
            optimal_tide_high=self.optimal_tide_high,
            exposure_factor=self.exposure_factor,
        )


class BreakDatabase:
    """Database of surf breaks loaded from YAML."""

    def __init__(self, breaks_path: Optional[Path] = None):
        """Initialize the break database.

        Args:
            breaks_path: Path to breaks.yaml. Defaults to config/breaks.yaml.
        """
        if breaks_path is None:
            # Find config relative to this file or cwd
            possible_paths = [
                Path(__file__).parent.parent.parent / "config" / "breaks.yaml",
                Path.cwd() / "config" / "breaks.yaml",
            ]
            for path in possible_paths:
                if path.exists():
                    breaks_path = path
                    break

        if breaks_path is None or not Path(breaks_path).exists():
            raise FileNotFoundError("Could not find breaks.yaml")

        self.breaks_path = Path(breaks_path)
        self._breaks: dict[str, SurfBreak] = {}
        self._load_breaks()

    def _load_breaks(self) -> None:
        """Load breaks from YAML file."""
        with open(self.breaks_path) as f:
            data = yaml.safe_load(f) or {}

        for break_data in data.get("breaks", []):
            surf_break = self._parse_break(break_data)
            self._breaks[surf_break.id] = surf_break

    def _parse_break(self, data: dict) -> SurfBreak:
        """Parse a break dictionary into a SurfBreak object."""
        break_id = data.get("id", "unknown")
        coords = data.get("coordinates", {})
        swell = data.get("optimal_swell_dir", {})
        tide = data.get("optimal_tide", {})

        try:
            surf_break = SurfBreak(
                id=break_id,
                name=data.get("name", break_id),
                region=data.get("region", ""),
                coordinates=Coordinates(lat=coords["lat"], lon=coords["lon"]),
                break_type=data.get("break_type", "beach"),
                orientation_deg=data["orientation_deg"],
                optimal_swell_dir_min=swell["min"],
                optimal_swell_dir_max=swell["max"],
                optimal_tide_low=tide["low"],
                optimal_tide_high=tide["high"],
                optimal_wind_dir=data.get("optimal_wind_dir", ""),
                exposure_factor=data.get("exposure_factor"),
                nearest_tide_station=_station_id(data.get("nearest_tide_station")),
                nearest_buoy_station=_station_id(data.get("nearest_buoy_station")),
                webcam_url=data.get("webcam_url"),
            )
        except KeyError as e:
            raise ValueError(f"Break {break_id!r} is missing required field {e}") from e

        if surf_break.break_type not in BREAK_TYPES:
            raise ValueError(f"Break {break_id!r} has unknown break_type {surf_break.break_type!r}")

        return surf_break

    def get_break(self, break_id: str) -> Optional[SurfBreak]:
        """Get a break by ID.

        Args:
            break_id: Break identifier (e.g., "trestles")

        Returns:
            SurfBreak or None if not found
        """
        return self._breaks.get(break_id)

    def get_break_by_name(self, name: str) -> Optional[SurfBreak]:
        """Get a break by name (case-insensitive partial match)."""
        name_lower = name.lower()
        for surf_break in self._breaks.values():
            if name_lower in surf_break.name.lower():
                return surf_break
        return None

    def get_all_breaks(self) -> list[SurfBreak]:
        """Get all breaks."""
        return list(self._breaks.values())

    def get_breaks_by_region(self, region: str) -> list[SurfBreak]:
        return [b for b in self._breaks.values() if b.region.lower() == region.lower()]

    def get_breaks_by_buoy(self, buoy_id: str) -> list[SurfBreak]:
        return [b for b in self._breaks.values() if b.nearest_buoy_station == buoy_id]

    @property
    def break_count(self) -> int:
        """Get total number of breaks."""
        return len(self._breaks)

    @property
    def regions(self) -> list[str]:
        """Get region names in load order."""
        return list(dict.fromkeys(b.region for b in self._breaks.values()))


def _station_id(value) -> Optional[str]:
    # YAML reads unquoted station ids like 46025 as ints
    if value is None or value == "":
        return None
    return str(value)


# Convenience function for quick access
_default_db: Optional[BreakDatabase] = None


def get_break_database() -> BreakDatabase:
    """Get the default break database (singleton)."""
    global _default_db
    if _default_db is None:
        _default_db = BreakDatabase()
    return _default_db


def get_break(break_id: str) -> Optional[SurfBreak]:
    """Quick access to get a break by ID."""
    return get_break_database().get_break(break_id)
