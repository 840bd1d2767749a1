"""boto3 client construction.

This module builds AWS clients from the typed runtime config so every
adapter shares one session policy.
"""

from __future__ import annotations

from typing import Any

import boto3

from core.config import LarderConfig


def create_aws_client(config: LarderConfig, service_name: str) -> Any:
    """Create a boto3 client for one AWS service.

    Args:
        config: Runtime config containing region and optional profile.
        service_name: boto3 service name, e.g. ``"s3"`` or ``"dynamodb"``.

    Returns:
        Boto3 service client.
    """
    session = boto3.session.Session(**build_session_kwargs(config))
    return session.client(service_name)


def build_session_kwargs(config: LarderConfig) -> dict[str, str]:
    """Build boto3 Session kwargs from config.

    Args:
        config: Runtime config.

    Returns:
        Session keyword arguments.
    """
    kwargs: dict[str, str] = {"region_name": config.aws_region}
    if config.aws_profile:
        kwargs["profile_name"] = config.aws_profile
    return kwargs
