"""Domain layer: entities shared by every synchronization component."""
