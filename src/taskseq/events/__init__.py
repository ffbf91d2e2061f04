"""
Notification hub.

Components:
- hub.py: NotificationHub, a synchronous publish/subscribe broadcaster
- event_models.py: QueueEvent channels and their payloads
"""
