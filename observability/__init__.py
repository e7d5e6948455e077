"""Observability utilities for the live coverage engine."""
from .logger import log_event

__all__ = ["log_event"]
