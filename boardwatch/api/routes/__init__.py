from .webhooks import router as webhooks_router
from .monitor import router as monitor_router

__all__ = ["webhooks_router", "monitor_router"]
