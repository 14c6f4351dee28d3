"""Scoring, aggregation and trend analysis over collected articles."""
