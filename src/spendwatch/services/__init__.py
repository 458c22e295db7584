"""Domain services for authentication, entry forms and the dashboard."""
