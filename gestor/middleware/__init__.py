"""미들웨어 패키지 (Request id, request logging, rate limiting)."""
