"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- github: REST API client (changed files, PR comments) and Actions runtime
- storage: Object storage (R2/S3)

These wrappers translate between external formats and our domain models.
"""
