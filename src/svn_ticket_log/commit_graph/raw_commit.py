from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional, Tuple


@dataclass(frozen=True)
class RawCommit:
    """외부 로그 수집기가 전달하는 커밋 원본 데이터"""
    id: str
    parent_ids: Tuple[str, ...]
    author: str
    timestamp: Optional[datetime]
    summary: str
    full_message: str
    changed_paths: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawCommit':
        """딕셔너리에서 RawCommit 객체 생성"""
        timestamp = data.get('timestamp')
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp.replace('Z', '+00:00'))
        full_message = data.get('full_message', data.get('message', ''))
        summary = data.get('summary')
        if summary is None:
            summary = full_message.split('\n', 1)[0]
        return cls(
            id=data['id'],
            parent_ids=tuple(data.get('parent_ids', ())),
            author=data.get('author', ''),
            timestamp=timestamp,
            summary=summary,
            full_message=full_message,
            changed_paths=tuple(data.get('changed_paths', ())),
        )
