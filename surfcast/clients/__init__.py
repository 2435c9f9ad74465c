"""API clients for live observation and tide data sources."""

from surfcast.clients.buoy_client import BuoyClient, BuoyError
from surfcast.clients.noaa_tides_client import NOAATidesClient, NOAATidesError

__all__ = [
    "BuoyClient",
    "BuoyError",
    "NOAATidesClient",
    "NOAATidesError",
]
