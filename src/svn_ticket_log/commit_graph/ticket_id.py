"""티켓 식별자 모듈"""

import re
from dataclasses import dataclass
from typing import Tuple

_TRAILING_NUMBER_REGEX = re.compile(r'^(.*?)(\d+)$')


@dataclass(frozen=True)
class TicketId:
    """정규화된 티켓 식별자 (프로젝트 키 + 번호)

    대문자로 정규화하여 저장하므로 대소문자를 구분하지 않고 비교되며
    집합/딕셔너리 키로 사용됩니다.
    """
    value: str

    def __post_init__(self):
        normalized = self.value.strip().upper()
        if not normalized:
            raise ValueError("Ticket identifier must not be empty")
        object.__setattr__(self, 'value', normalized)

    def __eq__(self, other) -> bool:
        if isinstance(other, TicketId):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other.strip().upper()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __lt__(self, other: 'TicketId') -> bool:
        return self.sort_key() < other.sort_key()

    def __str__(self) -> str:
        return self.value

    @property
    def project(self) -> str:
        """프로젝트 키 (구분자 제외)"""
        match = _TRAILING_NUMBER_REGEX.match(self.value)
        if not match:
            return self.value
        return match.group(1).rstrip('-_ :#')

    @property
    def number(self) -> int:
        """티켓 번호 (번호가 없으면 0)"""
        match = _TRAILING_NUMBER_REGEX.match(self.value)
        return int(match.group(2)) if match else 0

    def sort_key(self) -> Tuple[str, int, str]:
        """자연 정렬 키 (PROJ-9 < PROJ-10)"""
        return (self.project, self.number, self.value)
