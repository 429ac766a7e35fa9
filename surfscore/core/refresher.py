"""Break refresh and ranking.

Fetches forecast, buoy and tide data for breaks, fuses them and scores
today plus each forecast day. This is the orchestration layer that connects:
- Break database (breaks.py)
- API clients (clients/)
- Fusion (fusion.py) and scoring (scorer.py)

The marine forecast is required: without it a break is skipped and counted
as an error. Buoy and tide data are optional and only improve accuracy.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from surfscore.clients.buoy_client import BuoyClient, BuoyError
from surfscore.clients.noaa_tides_client import NOAATidesClient, NOAATidesError
from surfscore.clients.open_meteo_client import MarineForecastClient, MarineForecastError
from surfscore.core.breaks import BreakDatabase, SurfBreak, get_break_database
from surfscore.core.fusion import FusedConditions, fuse_conditions
from surfscore.core.readings import BuoyObservation, MarineForecastDay, TideConditions
from surfscore.core.scorer import SurfScorer
from surfscore.settings import BATCH_SIZE, FORECAST_DAYS


logger = logging.getLogger(__name__)


@dataclass
class ConditionReport:
    """Scored conditions for one break on one day."""
    break_id: str
    forecast_date: date
    fetched_at: datetime
    is_today: bool

    wave_height_ft: float
    swell_height_ft: float
    face_height_ft: float
    swell_period_s: float
    swell_direction_deg: float
    wind_speed_mph: float
    wind_direction_deg: float
    wind_wave_height_ft: float
    tide_height_ft: Optional[float]
    tide_state: Optional[str]

    quality_score: int
    quality_label: str
    wind_type: str = "onshore"
    sources: list[str] = field(default_factory=list)  # "forecast", "buoy", "tide"


@dataclass
class BreakForecast:
    """Today's report plus the following forecast days for a break."""
    surf_break: SurfBreak
    today: ConditionReport
    forecast: list[ConditionReport] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    rank: int = 0

    @property
    def score(self) -> int:
        return self.today.quality_score


@dataclass
class RefreshSummary:
    """Outcome of refreshing a set of breaks."""
    processed: int = 0
    errors: int = 0
    elapsed_seconds: float = 0.0
    results: list[BreakForecast] = field(default_factory=list)
    failed_breaks: list[str] = field(default_factory=list)


class BreakRefresher:
    """Refreshes and ranks surf breaks."""

    def __init__(
        self,
        break_db: Optional[BreakDatabase] = None,
        marine_client: Optional[MarineForecastClient] = None,
        buoy_client: Optional[BuoyClient] = None,
        tides_client: Optional[NOAATidesClient] = None,
        forecast_days: int = FORECAST_DAYS,
    ):
        """Initialize the refresher with optional dependency injection.

        Args:
            break_db: Break database. Defaults to loading from config/breaks.yaml.
            marine_client: Open-Meteo marine forecast client.
            buoy_client: NDBC buoy client.
            tides_client: NOAA tides client.
            forecast_days: Days of forecast to score, today included.
        """
        self._break_db = break_db
        self.marine = marine_client or MarineForecastClient()
        self.buoy = buoy_client or BuoyClient()
        self.tides = tides_client or NOAATidesClient()
        self.scorer = SurfScorer()
        self.forecast_days = forecast_days

    @property
    def break_db(self) -> BreakDatabase:
        if self._break_db is None:
            self._break_db = get_break_database()
        return self._break_db

    def _fetch_buoy(self, surf_break: SurfBreak, errors: list) -> Optional[BuoyObservation]:
        """Fetch the latest buoy observation (best effort)."""
        if not surf_break.nearest_buoy_station:
            return None

        try:
            return self.buoy.get_observation(surf_break.nearest_buoy_station)
        except BuoyError as e:
            errors.append(f"Buoy error: {e}")
            logger.warning(f"Buoy fetch failed for {surf_break.id}: {e}")
            return None

    def _fetch_today_tide(
        self,
        surf_break: SurfBreak,
        at: Optional[datetime],
        errors: list,
    ) -> Optional[TideConditions]:
        """Fetch the tide at the break-local time `at` (best effort)."""
        if not surf_break.nearest_tide_station:
            return None

        try:
            return self.tides.get_tide_conditions(surf_break.nearest_tide_station, at=at)
        except NOAATidesError as e:
            errors.append(f"Tides error: {e}")
            logger.warning(f"Tides fetch failed for {surf_break.id}: {e}")
            return None

    def _fetch_tide_forecast(
        self,
        surf_break: SurfBreak,
        start_date: date,
        errors: list,
    ) -> dict[date, TideConditions]:
        """Fetch one tide reading per forecast day (best effort)."""
        if not surf_break.nearest_tide_station:
            return {}

        end_date = start_date + timedelta(days=self.forecast_days - 1)
        try:
            return self.tides.get_tide_forecast_days(
                surf_break.nearest_tide_station, start_date, end_date
            )
        except NOAATidesError as e:
            errors.append(f"Tide forecast error: {e}")
            logger.warning(f"Tide forecast fetch failed for {surf_break.id}: {e}")
            return {}

    def score_day(
        self,
        surf_break: SurfBreak,
        forecast: MarineForecastDay,
        fetched_at: datetime,
        is_today: bool = False,
        observation: Optional[BuoyObservation] = None,
        tide: Optional[TideConditions] = None,
    ) -> ConditionReport:
        """Fuse and score one day for a break.

        Args:
            surf_break: The surf break
            forecast: Marine forecast for the day
            fetched_at: Time the data was fetched
            is_today: Whether this is today's report
            observation: Buoy observation, only used for today
            tide: Tide reading for the day

        Returns:
            ConditionReport for the day
        """
        fused: FusedConditions = fuse_conditions(
            forecast,
            observation=observation if is_today else None,
            tide=tide,
            exposure_factor=surf_break.exposure_factor,
        )
        result = self.scorer.score(surf_break.break_info, fused.conditions)

        sources = ["forecast"]
        if fused.used_buoy:
            sources.append("buoy")
        if tide is not None:
            sources.append("tide")

        conditions = fused.conditions
        return ConditionReport(
            break_id=surf_break.id,
            forecast_date=forecast.date,
            fetched_at=fetched_at,
            is_today=is_today,
            wave_height_ft=fused.wave_height_ft,
            swell_height_ft=fused.swell_height_ft,
            face_height_ft=fused.face_height_ft,
            swell_period_s=conditions.swell_period_s,
            swell_direction_deg=conditions.swell_direction_deg,
            wind_speed_mph=conditions.wind_speed_mph,
            wind_direction_deg=conditions.wind_direction_deg,
            wind_wave_height_ft=forecast.wind_wave_height_ft,
            tide_height_ft=conditions.tide_height_ft,
            tide_state=fused.tide_state,
            quality_score=result.total_score,
            quality_label=result.label.value,
            wind_type=result.wind_type,
            sources=sources,
        )

    def refresh_break(self, surf_break: SurfBreak) -> BreakForecast:
        """Fetch and score today plus the forecast days for one break.

        Args:
            surf_break: The surf break

        Returns:
            BreakForecast with today's report and later days

        Raises:
            MarineForecastError: If no marine forecast is available
        """
        lat = surf_break.coordinates.lat
        lon = surf_break.coordinates.lon
        errors: list[str] = []

        forecast_days = self.marine.get_forecast(lat, lon, days=self.forecast_days)
        if not forecast_days:
            raise MarineForecastError(f"No marine forecast data for {surf_break.id}")
        current = self.marine.get_current_conditions(lat, lon, days=self.forecast_days)

        observation = self._fetch_buoy(surf_break, errors)
        today_tide = self._fetch_today_tide(surf_break, current.local_time, errors)
        tide_forecast = self._fetch_tide_forecast(surf_break, current.date, errors)

        fetched_at = datetime.now()

        today = self.score_day(
            surf_break,
            current,
            fetched_at,
            is_today=True,
            observation=observation,
            tide=today_tide,
        )

        later_days = [
            self.score_day(surf_break, day, fetched_at, tide=tide_forecast.get(day.date))
            for day in forecast_days
            if day.date != current.date
        ]

        return BreakForecast(
            surf_break=surf_break,
            today=today,
            forecast=later_days,
            errors=errors,
        )

    def refresh_all(
        self,
        breaks: Optional[list[SurfBreak]] = None,
        batch_size: int = BATCH_SIZE,
    ) -> RefreshSummary:
        """Refresh every break, counting successes and failures.

        One break failing never stops the others.

        Args:
            breaks: Breaks to refresh. Defaults to all breaks.
            batch_size: Breaks fetched concurrently per batch.

        Returns:
            RefreshSummary with per-break results
        """
        if breaks is None:
            breaks = self.break_db.get_all_breaks()

        start_time = time.monotonic()
        summary = RefreshSummary()

        logger.info(f"Fetching conditions for {len(breaks)} breaks...")

        batch_size = max(batch_size, 1)
        for i in range(0, len(breaks), batch_size):
            batch = breaks[i:i + batch_size]
            logger.debug(f"Refreshing batch {i // batch_size + 1}: {[b.id for b in batch]}")

            with ThreadPoolExecutor(max_workers=len(batch)) as executor:
                future_map = {
                    executor.submit(self.refresh_break, surf_break): surf_break for surf_break in batch
                }

            # Collected in submission order so results keep the input order
            for future, surf_break in future_map.items():
                try:
                    summary.results.append(future.result())
                    summary.processed += 1
                except MarineForecastError as e:
                    logger.error(f"No marine data for {surf_break.name}: {e}")
                    summary.errors += 1
                    summary.failed_breaks.append(surf_break.id)
                except Exception as e:
                    logger.error(f"Error processing {surf_break.name}: {e}")
                    summary.errors += 1
                    summary.failed_breaks.append(surf_break.id)

        summary.elapsed_seconds = round(time.monotonic() - start_time, 1)

        logger.info(
            f"Fetch conditions complete: {summary.processed} success, "
            f"{summary.errors} errors in {summary.elapsed_seconds}s"
        )
        return summary

    def rank_breaks(
        self,
        breaks: Optional[list[SurfBreak]] = None,
        min_score: int = 0,
        top_n: Optional[int] = None,
    ) -> list[BreakForecast]:
        """Rank breaks by today's score.

        Args:
            breaks: Breaks to rank. Defaults to all breaks.
            min_score: Minimum score to include.
            top_n: Return only top N breaks.

        Returns:
            List of BreakForecast sorted by score (highest first)
        """
        summary = self.refresh_all(breaks)
        return rank_results(summary.results, min_score=min_score, top_n=top_n)


def rank_results(
    results: list[BreakForecast],
    min_score: int = 0,
    top_n: Optional[int] = None,
) -> list[BreakForecast]:
    """Sort refreshed breaks by today's score and assign ranks."""
    ranked = [r for r in results if r.score >= min_score]
    ranked.sort(key=lambda r: r.score, reverse=True)

    for i, result in enumerate(ranked, 1):
        result.rank = i

    if top_n:
        ranked = ranked[:top_n]

    return ranked
