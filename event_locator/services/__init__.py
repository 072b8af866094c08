"""Location resolution, search, enrichment and notification services."""
