"""Notification delivery and read-state reconciliation client.

Keeps a signed-in identity's notification list and unread counter consistent
across the websocket push channel, the polled REST surface and optimistic
local commands.
"""
