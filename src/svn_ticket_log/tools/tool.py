"""외부 명령어 도구 인터페이스

Tool 추상 클래스를 정의합니다.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from .tool_result import ToolResult


class Tool(ABC):
    """인자 목록으로 외부 프로그램을 실행하는 도구"""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @abstractmethod
    def validate_parameters(self, params: Dict[str, Any]) -> bool:
        """params 가 execute 에 그대로 전달될 수 있는지 검증"""
        pass

    @abstractmethod
    def execute(self, args: Sequence[str], cwd: Optional[str] = None,
                timeout: int = 300) -> ToolResult:
        pass

    def invoke(self, params: Dict[str, Any]) -> ToolResult:
        """파라미터 딕셔너리로 실행 (검증 실패 시 실행하지 않고 실패 결과 반환)

        Args:
            params: ``args`` 와 선택적인 ``cwd``, ``timeout``

        Returns:
            ToolResult: 실행 결과
        """
        if not self.validate_parameters(params):
            return ToolResult(
                success=False,
                data={"params": params},
                error_message=f"Invalid parameters for {self.name}: {sorted(params)}"
            )
        return self.execute(**params)
