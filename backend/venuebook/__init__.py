"""Venue booking availability and scheduling engine."""
