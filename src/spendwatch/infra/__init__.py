"""Storage and change-notification infrastructure."""
