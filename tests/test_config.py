"""설정 검증 테스트.

Settings validation tests.
"""

import pytest
from pydantic import ValidationError

from gestor.config import Settings


class TestSettings:
    """환경 설정 파싱 및 검증."""

    def test_admin_whitelist_parsed_from_comma_string(self):
        s = Settings(ADMIN_EMAIL_WHITELIST=" Boss@X.com , other@x.com,, ")
        assert s.ADMIN_EMAIL_WHITELIST == ["boss@x.com", "other@x.com"]
        assert s.is_whitelisted_admin("BOSS@x.com")
        assert not s.is_whitelisted_admin("nobody@x.com")

    def test_cors_origins_parsed_from_comma_string(self):
        s = Settings(CORS_ORIGINS="https://a.example.com, https://b.example.com")
        assert s.CORS_ORIGINS == ["https://a.example.com", "https://b.example.com"]

    def test_settings_are_frozen(self):
        s = Settings()
        with pytest.raises(ValidationError):
            s.ACCESS_TOKEN_EXPIRE_MINUTES = 60

    def test_empty_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(JWT_ACCESS_SECRET="   ")

    @pytest.mark.parametrize("minutes", [0, -5, 1441])
    def test_access_expiry_bounds(self, minutes: int):
        with pytest.raises(ValidationError):
            Settings(ACCESS_TOKEN_EXPIRE_MINUTES=minutes)

    def test_refresh_expiry_bounds(self):
        with pytest.raises(ValidationError):
            Settings(REFRESH_TOKEN_EXPIRE_DAYS=0)

    def test_production_requires_distinct_secrets(self):
        with pytest.raises(ValidationError):
            Settings(ENVIRONMENT="production", JWT_ACCESS_SECRET="same", JWT_REFRESH_SECRET="same")
        s = Settings(ENVIRONMENT="production", JWT_ACCESS_SECRET="one", JWT_REFRESH_SECRET="two")
        assert s.is_production
        assert not s.is_development
