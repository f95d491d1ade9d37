"""Core provider abstractions."""
from neo_watch.providers.core.gateway_abc import NeoGatewayABC

__all__ = ["NeoGatewayABC"]
