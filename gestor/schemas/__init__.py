"""Pydantic 스키마 패키지 (Request/response schemas)."""
