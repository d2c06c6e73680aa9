from .dispatcher import Dispatcher, MessageHandler
from .network import ConnectionState, HypermediaClient, backoff_delay

__all__ = ["ConnectionState", "Dispatcher", "HypermediaClient", "MessageHandler", "backoff_delay"]
