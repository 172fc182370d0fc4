"""Provider status and system health reporting."""
