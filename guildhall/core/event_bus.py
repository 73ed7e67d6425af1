"""EventBus - 길드 시스템의 완료 통지용 동기식 이벤트 디스패처

규칙:
- 전역 상태 없음. 필요한 컴포넌트에 인스턴스를 명시적으로 전달한다
- 이벤트 타입(클래스)별로 핸들러를 등록한다
- publish는 같은 호출 스택에서 등록 순서대로 핸들러를 호출한다
- 전파 깊이 최대 max_depth 단계 (핸들러 안에서의 재발행 포함)
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Type

from guildhall.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 5  # 한 publish 체인 내 재발행 최대 깊이

# 핸들러 타입: 이벤트 객체를 받는 callable
EventHandler = Callable[[Any], None]


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))


class EventBus:
    """동기식 타입 기반 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe(MissionResolvedEvent, ledger.on_mission_resolved)
        bus.publish(MissionResolvedEvent(quest_id="q1", ...))
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._handlers: Dict[type, List[EventHandler]] = defaultdict(list)
        self._max_depth = max(1, max_depth)
        self._current_depth: int = 0

    def subscribe(self, event_type: Type[Any], handler: EventHandler) -> None:
        """이벤트 구독 등록"""
        if handler is None:
            raise ValueError("handler is required")
        self._handlers[event_type].append(handler)
        logger.debug(
            "EventBus subscribe: %s -> %s", event_type.__name__, _handler_name(handler)
        )

    def unsubscribe(self, event_type: Type[Any], handler: EventHandler) -> None:
        """이벤트 구독 해제. 미등록 핸들러는 경고만 남긴다."""
        handlers = self._handlers.get(event_type)
        if not handlers:
            logger.warning(
                "EventBus: no handlers for %s, cannot remove %s",
                event_type.__name__,
                _handler_name(handler),
            )
            return
        try:
            handlers.remove(handler)
        except ValueError:
            logger.warning(
                "EventBus: handler not registered: %s -> %s",
                event_type.__name__,
                _handler_name(handler),
            )
            return
        if not handlers:
            del self._handlers[event_type]
        logger.debug(
            "EventBus unsubscribe: %s -> %s", event_type.__name__, _handler_name(handler)
        )

    def publish(self, event: Any) -> int:
        """이벤트 발행. 등록된 핸들러를 동기 호출하고 호출된 핸들러 수를 반환.

        핸들러 예외는 기록 후 다음 핸들러로 진행한다.
        """
        event_type = type(event)

        if self._current_depth >= self._max_depth:
            logger.warning(
                "EventBus depth limit (%d) exceeded: %s dropped",
                self._max_depth,
                event_type.__name__,
            )
            return 0

        # 핸들러 안에서 구독/해제가 일어나도 이번 발행은 스냅샷 기준
        handlers = list(self._handlers.get(event_type, ()))
        if not handlers:
            logger.debug("EventBus: no subscribers for %s", event_type.__name__)
            return 0

        logger.info(
            "EventBus publish: %s (depth=%d, handlers=%d)",
            event_type.__name__,
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
                        _handler_name(handler),
                        event_type.__name__,
                    )
        finally:
            self._current_depth -= 1
        return len(handlers)

    def clear(self) -> None:
        """모든 구독 해제. 발행 깊이는 진행 중인 publish가 되돌린다."""
        self._handlers.clear()

    @property
    def handler_count(self) -> int:
        """등록된 총 핸들러 수"""
        return sum(len(h) for h in self._handlers.values())

    @property
    def max_depth(self) -> int:
        return self._max_depth
