from weather_pusher.models.base import Base
from weather_pusher.models.weather_observation import WeatherObservation

__all__ = ["Base", "WeatherObservation"]
