"""
API server package: health endpoint and application lifespan.

The lifespan bootstraps the achievements service and runs the rewards
worker alongside the HTTP server.
"""
