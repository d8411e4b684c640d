"""Response envelopes for cache introspection and invalidation."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CacheStatsData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entries: int
    hits: int
    misses: int
    evictions: int
    expirations: int
    max_entries: int = Field(serialization_alias="maxEntries")
    ttl_seconds: float = Field(serialization_alias="ttlSeconds")
    size_bytes: int = Field(serialization_alias="sizeBytes")
    hit_rate: float = Field(serialization_alias="hitRate", description="Percentage of lookups served from cache")
    timestamp: datetime
    cache_type: str = Field("memory", serialization_alias="cacheType")


class CacheStatsResponse(BaseModel):
    success: bool = True
    data: CacheStatsData


class CacheClearData(BaseModel):
    cleared: int


class CacheClearResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[CacheClearData] = None


class CacheErrorResponse(BaseModel):
    success: bool = False
    error: str
