"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be mocked for testing
- Configuration is passed explicitly instead of read from globals

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.assets.resolver import AssetConfig, AssetResolver
from ..infrastructure.database.videos import InMemoryVideoRepository, VideoRepository
from ..infrastructure.storage.client import StorageClient, StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Shared in-memory instances (persist across requests for the process)
_mock_storage_client = None
_video_repository = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    The key only grants access. Ownership of videos comes from the
    X-User-Id header read by the routes.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_video_repository() -> VideoRepository:
    """
    Provide the video repository.

    Metadata persistence lives outside this service, so we run against a
    process-wide in-memory store. Swap this dependency to plug in a real
    database.
    """
    global _video_repository

    if _video_repository is None:
        _video_repository = InMemoryVideoRepository()
        logger.info("Created shared in-memory video repository")

    return _video_repository


def get_storage_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StorageClient:
    """
    Provide storage client for uploads and URL signing.

    Returns either S3 client or mock client based on settings.

    In mock mode, we reuse the same client across requests
    so that uploaded objects persist during the testing session.
    """
    global _mock_storage_client

    if settings.s3_mock_mode:
        if _mock_storage_client is None:
            _mock_storage_client = create_storage_client(mock_mode=True)
            logger.info("Created shared mock storage client for session")
        logger.debug("Using shared mock storage client")
        return _mock_storage_client

    config = StorageConfig(
        bucket_name=settings.s3_bucket,
        region=settings.s3_region,
        endpoint_url=settings.s3_endpoint_url,
        access_key_id=settings.s3_access_key_id or None,
        secret_access_key=settings.s3_secret_access_key or None,
    )
    client = create_storage_client(config=config)
    logger.debug("Created S3 storage client")

    return client


def get_asset_resolver(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> AssetResolver:
    """
    Provide AssetResolver wired to the storage client.

    The resolver is stateless apart from its config, so a new one per
    request costs nothing.
    """
    config = AssetConfig(
        bucket=settings.s3_bucket,
        url_ttl=settings.presigned_url_ttl,
    )
    return AssetResolver(config=config, url_provider=storage)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
VideoRepositoryDep = Annotated[VideoRepository, Depends(get_video_repository)]
StorageClientDep = Annotated[StorageClient, Depends(get_storage_client)]
AssetResolverDep = Annotated[AssetResolver, Depends(get_asset_resolver)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
