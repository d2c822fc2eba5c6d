"""
Core publishing logic.

This module is transport-agnostic - it doesn't import boto3, httpx,
or anything GitHub-specific. Collaborators are described by protocols
and supplied by the infrastructure layer.
"""
