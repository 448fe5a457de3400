"""요청 주체 — 외부 인증 공급자가 확인한 사용자 식별자

전역 "현재 사용자" 상태를 읽지 않고, 소유자/관리자 확인이 필요한
모든 서비스 연산에 명시적으로 전달한다.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    user_id: str
    is_admin: bool = False
