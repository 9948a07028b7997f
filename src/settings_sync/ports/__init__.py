from .messaging import IBrokerClient, IMessageConsumer, IMessagePublisher
from .store import ISettingsStore

__all__ = [
    "IBrokerClient",
    "IMessageConsumer",
    "IMessagePublisher",
    "ISettingsStore",
]
