"""읽기 전용 git 명령어 실행 도구

GitCommandTool 클래스 정의입니다.
허용된 하위 명령어만 셸을 거치지 않고 실행합니다.
"""

import logging
import subprocess
import time
from typing import Any, Dict, List, Optional, Sequence

from .tool import Tool
from .tool_result import ToolResult

logger = logging.getLogger(__name__)


class GitCommandTool(Tool):
    """읽기 전용 git 명령어 실행 도구"""

    def __init__(self, repo_path: Optional[str] = None, git_executable: str = "git"):
        self.repo_path = repo_path
        self.git_executable = git_executable
        self.allowed_subcommands = {
            'log', 'rev-parse', 'branch', 'tag', 'remote', 'for-each-ref'
        }
        # branch/tag 에서 저장소를 바꾸는 옵션
        self.forbidden_options = {
            '--delete', '-d', '-D', '--move', '-m', '-M', '--force', '-f',
            '--set-upstream-to', '--unset-upstream', '--edit-description',
        }

    @property
    def name(self) -> str:
        return "git_command"

    @property
    def description(self) -> str:
        return "읽기 전용 git 명령어를 실행합니다 (log, rev-parse, branch, tag, remote, for-each-ref)"

    def validate_parameters(self, params: Dict[str, Any]) -> bool:
        """파라미터 유효성 검증

        Args:
            params: 검증할 파라미터 딕셔너리

        Returns:
            bool: 유효성 검증 결과
        """
        args = params.get('args')
        if not isinstance(args, (list, tuple)) or not args:
            return False
        if not all(isinstance(arg, str) for arg in args):
            return False

        if 'cwd' in params and params['cwd'] is not None and not isinstance(params['cwd'], str):
            return False

        if 'timeout' in params and not isinstance(params['timeout'], int):
            return False

        return True

    @staticmethod
    def _writes_output_file(arg: str) -> bool:
        """log 의 ``--output=<file>`` (줄임 표기 포함) 은 파일을 씀"""
        option = arg.split('=', 1)[0]
        return option.startswith('--ou') and '--output'.startswith(option)

    def _validate_command_safety(self, args: Sequence[str]) -> bool:
        if not args:
            return False
        subcommand = args[0]
        if subcommand not in self.allowed_subcommands:
            return False
        if subcommand == 'log':
            return not any(self._writes_output_file(arg) for arg in args[1:])
        if subcommand not in ('branch', 'tag', 'remote'):
            return True
        # 목록 조회만 허용: 옵션이 아닌 인자는 생성/삭제 대상이 됨
        if any(not arg.startswith('-') for arg in args[1:]):
            return False
        return not any(arg in self.forbidden_options for arg in args[1:])

    def execute(self, args: Sequence[str], cwd: Optional[str] = None,
                timeout: int = 300) -> ToolResult:
        """git 명령어를 실행합니다

        Args:
            args: git 뒤에 올 인자 목록 (예: ["log", "--all"])
            cwd: 실행 디렉토리 (기본값: 생성 시 지정한 저장소 경로)
            timeout: 타임아웃 (초, 기본값: 300)

        Returns:
            ToolResult: 명령어 실행 결과
        """
        args = list(args)
        command: List[str] = [self.git_executable, *args]
        command_str = ' '.join(command)

        if not self._validate_command_safety(args):
            return ToolResult(
                success=False,
                data={"command": command_str},
                error_message=f"Command blocked by safety filters: {command_str}"
            )

        start_time = time.time()
        try:
            result = subprocess.run(
                command,
                cwd=cwd or self.repo_path,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=timeout
            )
        except subprocess.TimeoutExpired:
            return ToolResult(
                success=False,
                data={"command": command_str},
                error_message=f"Command timed out after {timeout} seconds",
                execution_time=time.time() - start_time,
            )
        except OSError as e:
            return ToolResult(
                success=False,
                data={"command": command_str},
                error_message=f"Failed to execute command: {str(e)}",
                execution_time=time.time() - start_time,
            )

        stdout = result.stdout if result.stdout else ""
        stderr = result.stderr if result.stderr else ""
        execution_time = time.time() - start_time
        logger.debug(f"git 명령어 실행: {command_str} (returncode={result.returncode}, {execution_time:.2f}s)")

        return ToolResult(
            success=result.returncode == 0,
            data={
                "returncode": result.returncode,
                "stdout": stdout,
                "stderr": stderr,
                "command": command_str
            },
            error_message=stderr.strip() if result.returncode != 0 and stderr else None,
            execution_time=execution_time,
        )

    def run(self, *args: str, timeout: int = 300) -> str:
        """명령어를 실행하고 표준 출력을 반환 (실패 시 GitCommandError)"""
        return self.invoke({"args": list(args), "timeout": timeout}).raise_for_error().stdout
