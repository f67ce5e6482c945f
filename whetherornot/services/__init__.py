from .delivery import ConsumerHandle, ImmediateDispatcher, QueueDispatcher
from .weather import WeatherFetchService

__all__ = ["ConsumerHandle", "ImmediateDispatcher", "QueueDispatcher", "WeatherFetchService"]
