from .aggregator import ContentAggregator
from .stremio_addon import StremioAddonUseCase

__all__ = ["ContentAggregator", "StremioAddonUseCase"]
