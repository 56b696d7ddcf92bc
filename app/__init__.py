"""
Mentor Connect
Marketplace connecting engineers who own projects with students who apply to them.

Architecture:
- FastAPI: REST API under /api
- MongoDB: users, projects (applications embedded), homepage content
- JWT: bearer tokens resolved into an explicit Principal per request
"""

__version__ = "1.0.0"
