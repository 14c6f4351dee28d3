"""Article processing steps that run between ingest and analysis."""
