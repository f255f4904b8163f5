"""Shared service infrastructure: metrics and timing."""
