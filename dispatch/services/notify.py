import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

GROUP = 'updates'


def broadcast(kind: str, **data) -> None:
    """Push a ``{"event": kind, ...}`` message to every ``ws/updates/`` client.

    Runs after the database change has been committed, so a failing
    channel layer is logged and otherwise ignored.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    event = {'type': 'dispatch.event', 'event': kind, 'ts': timezone.now().isoformat(), **data}
    try:
        async_to_sync(channel_layer.group_send)(GROUP, event)
    except Exception:
        logger.exception('broadcast of %s failed', kind)
