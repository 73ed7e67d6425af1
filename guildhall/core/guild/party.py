"""파티: 한 번의 퀘스트 시도를 위해 묶인 모험가 참조 목록

멤버는 로스터가 소유한 AdventurerState의 공유 참조다. 복사하지 않는다.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from guildhall.core.errors import InvalidArgumentError
from guildhall.core.guild.adventurer import MAX_FATIGUE, AdventurerState
from guildhall.core.guild.models import StatBlock


class Party:
    def __init__(
        self, party_id: str, members: Optional[Iterable[AdventurerState]] = None
    ) -> None:
        if not party_id or not party_id.strip():
            raise InvalidArgumentError("party_id is required")

        self._party_id = party_id
        self._members: list[AdventurerState] = []
        for member in members or ():
            self.add_member(member)

    def __repr__(self) -> str:
        return f"Party(id={self._party_id!r}, members={self.member_ids})"

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[AdventurerState]:
        return iter(self._members)

    @property
    def party_id(self) -> str:
        return self._party_id

    @property
    def members(self) -> tuple[AdventurerState, ...]:
        return tuple(self._members)

    @property
    def member_ids(self) -> list[str]:
        return [m.adventurer_id for m in self._members]

    def add_member(self, member: AdventurerState) -> bool:
        """멤버 추가. 같은 ID가 이미 있으면 False (첫 번째 유지)."""
        if member is None:
            raise InvalidArgumentError("member is required")
        if any(m.adventurer_id == member.adventurer_id for m in self._members):
            return False
        self._members.append(member)
        return True

    def remove_member(self, adventurer_id: str) -> bool:
        for index, member in enumerate(self._members):
            if member.adventurer_id == adventurer_id:
                del self._members[index]
                return True
        return False

    # === 집계 ===

    def calculate_average_condition(self) -> float:
        """멤버 컨디션 평균 (0.0~1.0). HP 비율 × 피로 계수 × 부상 계수."""
        if not self._members:
            return 0.0

        total = 0.0
        for member in self._members:
            hp_ratio = member.stats.hp_ratio
            fatigue_factor = 1.0 - member.fatigue / MAX_FATIGUE
            injury_factor = (
                max(0.0, 1.0 - member.injury.severity * 0.2)
                if member.injury.is_injured
                else 1.0
            )
            total += max(0.0, min(hp_ratio * fatigue_factor * injury_factor, 1.0))
        return total / len(self._members)

    def get_average_fatigue(self) -> float:
        if not self._members:
            return 0.0
        return sum(m.fatigue for m in self._members) / len(self._members)

    def calculate_total_stats(self) -> StatBlock:
        total = StatBlock()
        for member in self._members:
            total = total + member.stats
        return total
