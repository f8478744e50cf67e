from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config


def create_boto3_config(
    *,
    connect_timeout: float = 5.0,
    read_timeout: float = 30.0,
    max_attempts: int = 3,
) -> Config:
    return Config(
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        retries={"mode": "standard", "max_attempts": max_attempts},
    )


def _client(
    service: str,
    *,
    endpoint_url: str | None,
    region_name: str | None,
    session: boto3.session.Session | None,
    config: Config | None,
) -> Any:
    kwargs: dict[str, Any] = {"config": config or create_boto3_config()}
    endpoint_url = (endpoint_url or "").strip()
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    if region_name:
        kwargs["region_name"] = region_name
    return (session or boto3.session.Session()).client(service, **kwargs)


def get_dynamodb_client(
    *,
    endpoint_url: str | None = None,
    region_name: str | None = None,
    session: boto3.session.Session | None = None,
    config: Config | None = None,
) -> Any:
    return _client(
        "dynamodb", endpoint_url=endpoint_url, region_name=region_name, session=session, config=config
    )


def get_streams_client(
    *,
    endpoint_url: str | None = None,
    region_name: str | None = None,
    session: boto3.session.Session | None = None,
    config: Config | None = None,
) -> Any:
    return _client(
        "dynamodbstreams",
        endpoint_url=endpoint_url,
        region_name=region_name,
        session=session,
        config=config,
    )
