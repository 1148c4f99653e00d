"""
Semantic type aliases for pubsub-harness datastructures.

This module provides meaningful type aliases that make the codebase more
self-documenting by replacing raw types like str, float, bytes with
semantic aliases.
"""

from collections.abc import Mapping
from typing import Any, TypeAlias

# Time types
DurationSeconds: TypeAlias = float
Timestamp: TypeAlias = float

# Pub/sub entity types
ChannelName: TypeAlias = str
GroupName: TypeAlias = str
EntityName: TypeAlias = str
ActionTag: TypeAlias = str

# Payload types
RawPayload: TypeAlias = bytes | str
PayloadText: TypeAlias = str
JsonDict: TypeAlias = dict[str, Any]

# HTTP replay types
HttpMethod: TypeAlias = str
HostName: TypeAlias = str
UrlPath: TypeAlias = str
QueryKey: TypeAlias = str
QueryValue: TypeAlias = str
QueryMapping: TypeAlias = Mapping[QueryKey, QueryValue]
StatusCode: TypeAlias = int
ResponseBody: TypeAlias = str
