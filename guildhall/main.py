"""Guildhall 조립 진입점

설정 → 로깅 → EventBus → GuildService 순으로 구성한다.
"""

from typing import Optional

from guildhall.config import Settings
from guildhall.config import settings as default_settings
from guildhall.core.event_bus import EventBus
from guildhall.core.logging import get_logger, setup_logging
from guildhall.services.guild_service import GuildService

logger = get_logger(__name__)


def create_guild_service(settings: Optional[Settings] = None) -> GuildService:
    """설정값으로 EventBus와 GuildService를 새로 만든다."""
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    event_bus = EventBus(max_depth=settings.EVENT_MAX_DEPTH)
    service = GuildService(event_bus, settings=settings)
    logger.info(
        "Guildhall ready (min_party_size=%d, difficulty_multiplier=%.2f)",
        service.planner.minimum_party_size,
        settings.GLOBAL_DIFFICULTY_MULTIPLIER,
    )
    return service
