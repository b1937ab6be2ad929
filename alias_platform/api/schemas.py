"""
Pydantic schemas for request/response bodies of the alias API.
"""

from typing import List, Tuple

from pydantic import BaseModel


class CreateAliasRequest(BaseModel):
    """Body of `POST /{alias}`."""
    url: str


class AliasStats(BaseModel):
    """One entry of the `GET /stats` array."""
    alias: str
    count: int


def stats_payload(pairs: List[Tuple[str, int]]) -> List[dict]:
    """Turn store stats into the JSON-ready `[{"alias", "count"}]` list."""
    return [AliasStats(alias=alias, count=count).model_dump() for alias, count in pairs]
