"""EventBus - 서비스 간 도메인 이벤트 통신

규칙:
- 서비스는 다른 서비스를 직접 import하지 않는다
- 이벤트는 식별자(ID)만 전달한다
- 전파 깊이 최대 MAX_DEPTH 단계
- 한 전파 체인 안에서 동일 source의 동일 이벤트 중복 발행 금지
  (최상위 emit마다 새 체인)
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

from warband.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # 한 체인 내 이벤트 전파 최대 깊이


@dataclass
class DomainEvent:
    """이벤트 데이터 컨테이너

    Args:
        event_type: 이벤트 유형 (예: "character_created", "gear_updated")
        data: 이벤트 데이터 (ID 위주, 무거운 객체 금지)
        source: 발행한 서비스 이름
    """

    event_type: str
    data: dict[str, Any]
    source: str

    # 내부 추적용 (외부에서 설정하지 않음)
    _depth: int = field(default=0, repr=False)


EventHandler = Callable[[DomainEvent], None]


class EventBus:
    """동기식 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe("character_created", audit.on_character_created)
        bus.emit(DomainEvent(event_type="character_created",
                             data={"character_id": 1}, source="character_service"))
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_in_chain: set[str] = set()  # "source:event_type"

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("EventBus subscribe: %s -> %s", event_type, handler.__qualname__)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
            except ValueError:
                logger.warning(
                    "Handler not subscribed: %s -> %s",
                    event_type,
                    handler.__qualname__,
                )

    def emit(self, event: DomainEvent) -> None:
        """이벤트 발행. 등록된 핸들러를 동기 호출.

        핸들러 예외는 로그만 남기고 발행자에게 전파하지 않는다.
        """
        if self._current_depth == 0:
            self._emitted_in_chain.clear()

        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                "EventBus depth limit (%d): %s:%s dropped",
                MAX_DEPTH,
                event.source,
                event.event_type,
            )
            return

        chain_key = f"{event.source}:{event.event_type}"
        if chain_key in self._emitted_in_chain:
            logger.warning("EventBus duplicate in chain: %s", chain_key)
            return

        self._emitted_in_chain.add(chain_key)
        event._depth = self._current_depth

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            return

        logger.debug(
            "EventBus emit: %s (source=%s, depth=%d, handlers=%d)",
            event.event_type,
            event.source,
            self._current_depth,
            len(handlers),
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "EventBus handler error: %s (event=%s)",
                        handler.__qualname__,
                        event.event_type,
                    )
        finally:
            self._current_depth -= 1

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self._emitted_in_chain.clear()
        self._current_depth = 0

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self._handlers.values())
