"""모험가 로스터: AdventurerState 소유 레지스트리"""

from __future__ import annotations

from typing import Iterator, Optional

from guildhall.core.errors import AlreadyExistsError, InvalidArgumentError
from guildhall.core.guild.adventurer import AdventurerState
from guildhall.core.guild.enums import AdventurerAvailability


class AdventurerRoster:
    def __init__(self) -> None:
        self._by_id: dict[str, AdventurerState] = {}

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, adventurer_id: object) -> bool:
        return adventurer_id in self._by_id

    def __iter__(self) -> Iterator[AdventurerState]:
        return iter(list(self._by_id.values()))

    def add(self, adventurer: AdventurerState) -> None:
        if adventurer is None:
            raise InvalidArgumentError("adventurer is required")
        if adventurer.adventurer_id in self._by_id:
            raise AlreadyExistsError(
                f"Adventurer already exists: {adventurer.adventurer_id}"
            )
        self._by_id[adventurer.adventurer_id] = adventurer

    def remove(self, adventurer_id: str) -> bool:
        return self._by_id.pop(adventurer_id, None) is not None

    def find_by_id(self, adventurer_id: str) -> Optional[AdventurerState]:
        if not adventurer_id or not adventurer_id.strip():
            return None
        return self._by_id.get(adventurer_id)

    def get_all(self) -> list[AdventurerState]:
        return list(self._by_id.values())

    def get_idle_adventurers(self) -> list[AdventurerState]:
        return [
            a for a in self._by_id.values()
            if a.availability == AdventurerAvailability.IDLE
        ]

    def get_deployable_adventurers(self) -> list[AdventurerState]:
        return [a for a in self._by_id.values() if a.is_deployable()]
