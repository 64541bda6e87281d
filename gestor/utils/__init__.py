"""유틸리티 패키지 (Token codec, password hashing, errors, paging helpers)."""
