from __future__ import annotations

from functools import lru_cache
from typing import Any

import boto3

# Shared Client Registry (Lazy-loaded and cached per region)


@lru_cache(maxsize=32)
def get_ec2_client(region: str) -> Any:
    return boto3.client("ec2", region_name=region)
