"""
Tubely - video hosting backed by S3-compatible object storage.

This package contains the complete application:
- core: Framework-agnostic asset addressing and video models
- infrastructure: Object storage and metadata persistence
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
