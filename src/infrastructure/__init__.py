"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- storage: Object storage (S3-compatible)
- database: Video metadata persistence

These wrappers translate between external formats and our domain models.
"""
