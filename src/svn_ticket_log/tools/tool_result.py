"""도구 실행 결과

ToolResult 클래스 정의입니다.
"""

from dataclasses import dataclass
from typing import Any, Optional

from svn_ticket_log.exceptions import GitCommandError


@dataclass
class ToolResult:
    """도구 실행 결과

    data 에는 명령어 실행 정보(returncode, stdout, stderr, command)가 담깁니다.
    """
    success: bool
    data: Any
    error_message: Optional[str] = None
    execution_time: float = 0.0

    @property
    def stdout(self) -> str:
        if isinstance(self.data, dict):
            return self.data.get("stdout", "")
        return ""

    def raise_for_error(self) -> 'ToolResult':
        """실패한 결과면 GitCommandError 발생, 성공이면 자신을 반환"""
        if not self.success:
            command = self.data.get("command") if isinstance(self.data, dict) else None
            prefix = f"`{command}` failed" if command else "Git command failed"
            raise GitCommandError(f"{prefix}: {self.error_message or 'unknown error'}")
        return self
