"""Data provider gateways for near-Earth-object data.

This module provides a single interface (NeoGatewayABC) for the external
astronomical data source:

- NeoWsGateway: NASA's Near Earth Object Web Service (api.nasa.gov)

Gateways return the provider's JSON documents; NeoObject.from_payload turns
one object document into a read-only value object for scoring.

Example:
    async with NeoWsGateway(api_key="DEMO_KEY") as gateway:
        payload = await gateway.fetch_by_id("3542519")
        neo = NeoObject.from_payload(payload)
        print(neo.name, neo.closest_approach.miss_distance_au)
"""
from neo_watch.providers.core import NeoGatewayABC
from neo_watch.providers.neows import CloseApproach, NeoObject, NeoWsGateway

__all__ = [
    "CloseApproach",
    "NeoGatewayABC",
    "NeoObject",
    "NeoWsGateway",
]
