"""사용자명 생성 유틸리티.

Username generator. Registration does not ask for a username; one is
generated as "user-" followed by random lowercase base-36 characters.
"""

import secrets
import string

USERNAME_PREFIX = "user-"
_ALPHABET = string.ascii_lowercase + string.digits


def generate_username(length: int = 11) -> str:
    """무작위 사용자명 생성 (e.g. "user-k3v9q0x1m2a").

    Args:
        length: 접두사 뒤 무작위 문자 수 (Random characters after the prefix)

    Returns:
        str: 생성된 사용자명 (Generated username, at most 20 chars with the default length)
    """
    return USERNAME_PREFIX + "".join(secrets.choice(_ALPHABET) for _ in range(length))
