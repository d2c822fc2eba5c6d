"""
cypress-pr-videos - Cypress test videos on your pull requests.

This package contains the complete application:
- core: Transport-agnostic matching, upload, and comment logic
- infrastructure: GitHub and object storage integrations
- config: Application configuration
"""

__version__ = "0.1.0"
