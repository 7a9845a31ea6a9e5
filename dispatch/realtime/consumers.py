import json

from channels.generic.websocket import AsyncWebsocketConsumer

from dispatch.services.notify import GROUP


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes booking and ambulance status events to connected clients."""

    async def connect(self):
        await self.channel_layer.group_add(GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"event": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(GROUP, self.channel_name)

    async def dispatch_event(self, event):
        # event: {"type": "dispatch.event", "event": "booking.created", "ts": "...", ...}
        payload = {k: v for k, v in event.items() if k != "type"}
        await self.send(json.dumps(payload))
