"""API clients for environmental data sources."""

from surfscore.clients.buoy_client import BuoyClient, BuoyError
from surfscore.clients.noaa_tides_client import NOAATidesClient, NOAATidesError
from surfscore.clients.open_meteo_client import MarineForecastClient, MarineForecastError

__all__ = [
    "BuoyClient",
    "BuoyError",
    "MarineForecastClient",
    "MarineForecastError",
    "NOAATidesClient",
    "NOAATidesError",
]
