"""Application services coordinating the notification read model."""
