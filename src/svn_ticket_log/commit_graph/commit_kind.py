"""커밋 종류 분류 enum 모듈

커밋의 구조적 역할(일반, 머지, 체리픽, 리버트)을 표현합니다.
"""

from enum import Enum


class CommitKind(Enum):
    """커밋 종류

    한 커밋은 정확히 하나의 종류를 가집니다.
    여러 규칙이 동시에 해당되면 분류기의 우선순위(머지 > 리버트 > 체리픽)를 따릅니다.
    """

    PLAIN = "plain"              # 일반 커밋
    MERGE = "merge"              # 다른 커밋을 병합한 커밋
    CHERRY_PICK = "cherry_pick"  # 다른 커밋을 체리픽한 커밋
    REVERT = "revert"            # 이전 커밋을 되돌린 커밋

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        """개발자용 표현"""
        return f"CommitKind.{self.name}"
