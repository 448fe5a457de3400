"""장비 도메인 예외"""


class InvalidSlot(ValueError):
    """16개 정규 슬롯 밖의 슬롯 지정"""

    def __init__(self, slot: object) -> None:
        self.slot = slot
        super().__init__(f"Invalid slot: {slot!r}")


class OffHandLocked(ValueError):
    """양손 무기 장착 중 Off Hand 직접 수정 시도"""

    def __init__(self) -> None:
        super().__init__("Off Hand is locked by a two-handed Main Hand weapon")
