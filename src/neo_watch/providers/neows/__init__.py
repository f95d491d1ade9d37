"""NASA NeoWs gateway and payload models."""
from neo_watch.providers.neows.models import CloseApproach, NeoObject
from neo_watch.providers.neows.neows_gateway import NeoWsGateway

__all__ = ["CloseApproach", "NeoObject", "NeoWsGateway"]
