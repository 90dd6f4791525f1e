"""
Sitewright Routers - HTTP surface and conversation orchestration.
"""
