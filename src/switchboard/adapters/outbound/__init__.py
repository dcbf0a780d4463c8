"""Outbound adapters."""

from switchboard.adapters.outbound.http import HttpProviderAdapter

__all__ = ["HttpProviderAdapter"]
