"""Gestor API - 인증 및 세션 관리 서버.

Gestor API - Authentication and session management server.
"""

__version__ = "1.0.0"
