"""git_command_tool.py 단위 테스트

읽기 전용 git 명령어 실행 도구의 단위 테스트입니다.
"""

import pytest
import subprocess
from unittest.mock import patch, MagicMock

from svn_ticket_log.exceptions import GitCommandError
from svn_ticket_log.tools import GitCommandTool, ToolResult


def completed(returncode=0, stdout="", stderr=""):
    mock_result = MagicMock()
    mock_result.returncode = returncode
    mock_result.stdout = stdout
    mock_result.stderr = stderr
    return mock_result


@pytest.mark.unit
class TestGitCommandTool:
    """GitCommandTool 단위 테스트"""

    def test_tool_properties(self):
        """도구 기본 속성 테스트"""
        tool = GitCommandTool()

        assert tool.name == "git_command"
        assert "읽기 전용 git 명령어" in tool.description

    @pytest.mark.parametrize("params,expected", [
        ({"args": ["log", "--all"]}, True),
        ({"args": ("rev-parse", "HEAD"), "cwd": "/tmp"}, True),
        ({"args": ["log"], "timeout": 30}, True),
        ({}, False),  # args 누락
        ({"args": []}, False),  # 빈 인자
        ({"args": "log --all"}, False),  # 문자열은 허용하지 않음
        ({"args": ["log", 1]}, False),  # 잘못된 인자 타입
        ({"args": ["log"], "cwd": 123}, False),  # 잘못된 cwd 타입
        ({"args": ["log"], "timeout": "30"}, False),  # 잘못된 timeout 타입
    ])
    def test_validate_parameters(self, params, expected):
        """파라미터 유효성 검증 테스트"""
        tool = GitCommandTool()
        assert tool.validate_parameters(params) == expected

    @pytest.mark.parametrize("args,expected", [
        (["log", "--all", "--reflog"], True),
        (["log", "-m", "--first-parent"], True),  # log 의 -m 은 읽기 전용
        (["log", "--output-indicator-new=+"], True),
        (["log", "--output=/tmp/x"], False),  # 파일 쓰기
        (["log", "--all", "--output", "/tmp/x"], False),
        (["log", "--outp=/tmp/x"], False),  # 줄임 표기
        (["rev-parse", "--verify", "HEAD"], True),
        (["branch", "-r"], True),
        (["branch", "--list", "-a"], True),
        (["tag", "--list"], True),
        (["remote"], True),
        (["for-each-ref", "refs/heads"], True),
        (["branch", "new-branch"], False),  # 브랜치 생성
        (["branch", "-D"], False),  # 삭제 옵션
        (["tag", "v1.0"], False),  # 태그 생성
        (["remote", "add"], False),
        (["push", "origin"], False),  # 허용되지 않은 하위 명령어
        (["commit", "-m", "x"], False),
        ([], False),  # 하위 명령어 없음
    ])
    def test_validate_command_safety(self, args, expected):
        """명령어 안전성 검증 테스트"""
        tool = GitCommandTool()
        assert tool._validate_command_safety(args) == expected

    @patch('subprocess.run')
    def test_execute_success(self, mock_run):
        """명령어 실행 성공 테스트"""
        mock_run.return_value = completed(stdout="abc\n")

        tool = GitCommandTool(repo_path="/repo")
        result = tool.execute(["rev-parse", "HEAD"])

        assert result.success is True
        assert result.data["returncode"] == 0
        assert result.data["stdout"] == "abc\n"
        assert result.data["command"] == "git rev-parse HEAD"
        assert result.stdout == "abc\n"
        assert result.error_message is None

        # 셸을 거치지 않고 인자 목록으로 실행
        mock_run.assert_called_once_with(
            ["git", "rev-parse", "HEAD"],
            cwd="/repo",
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='replace',
            timeout=300
        )

    @patch('subprocess.run')
    def test_execute_with_custom_parameters(self, mock_run):
        """사용자 정의 파라미터로 명령어 실행 테스트"""
        mock_run.return_value = completed()

        tool = GitCommandTool(repo_path="/repo", git_executable="/usr/local/bin/git")
        tool.execute(["log"], cwd="/other", timeout=30)

        args, kwargs = mock_run.call_args
        assert args[0] == ["/usr/local/bin/git", "log"]
        assert kwargs["cwd"] == "/other"
        assert kwargs["timeout"] == 30

    @patch('subprocess.run')
    def test_execute_command_failure(self, mock_run):
        """명령어 실행 실패 테스트"""
        mock_run.return_value = completed(returncode=128, stderr="fatal: not a git repository\n")

        result = GitCommandTool().execute(["log"])

        assert result.success is False
        assert result.data["returncode"] == 128
        assert result.error_message == "fatal: not a git repository"

    @patch('subprocess.run')
    def test_execute_timeout(self, mock_run):
        """명령어 타임아웃 테스트"""
        mock_run.side_effect = subprocess.TimeoutExpired("git", 30)

        result = GitCommandTool().execute(["log"], timeout=30)

        assert result.success is False
        assert "Command timed out after 30 seconds" in result.error_message

    @patch('subprocess.run')
    def test_execute_missing_executable(self, mock_run):
        """git 실행 파일이 없는 경우"""
        mock_run.side_effect = FileNotFoundError("git")

        result = GitCommandTool().execute(["log"])

        assert result.success is False
        assert "Failed to execute command" in result.error_message

    @patch('subprocess.run')
    def test_execute_unsafe_command(self, mock_run):
        """안전하지 않은 명령어는 실행하지 않음"""
        result = GitCommandTool().execute(["push", "--force"])

        assert result.success is False
        assert "Command blocked by safety filters" in result.error_message
        mock_run.assert_not_called()

    @patch('subprocess.run')
    def test_run_returns_stdout(self, mock_run):
        mock_run.return_value = completed(stdout="origin\n")

        assert GitCommandTool().run("remote") == "origin\n"

    @patch('subprocess.run')
    def test_run_raises_on_failure(self, mock_run):
        mock_run.return_value = completed(returncode=1, stderr="fatal: bad revision 'nope'")

        with pytest.raises(GitCommandError) as exc_info:
            GitCommandTool().run("rev-parse", "nope")

        assert "git rev-parse nope" in str(exc_info.value)
        assert "bad revision" in str(exc_info.value)

    @patch('subprocess.run')
    def test_run_rejects_log_output_file(self, mock_run):
        """사용자 revspec 에 섞인 --output 은 실행하지 않음"""
        with pytest.raises(GitCommandError, match="Command blocked by safety filters"):
            GitCommandTool().run("log", "main", "--output=/tmp/stolen")

        mock_run.assert_not_called()

    @patch('subprocess.run')
    def test_run_validates_parameters(self, mock_run):
        with pytest.raises(GitCommandError, match="Invalid parameters for git_command"):
            GitCommandTool().run()

        mock_run.assert_not_called()

    @patch('subprocess.run')
    def test_invoke_with_parameters(self, mock_run):
        """파라미터 딕셔너리로 실행"""
        mock_run.return_value = completed(stdout="origin\n")

        result = GitCommandTool().invoke({"args": ["remote"], "timeout": 10})

        assert result.success is True
        assert mock_run.call_args[1]["timeout"] == 10

    @patch('subprocess.run')
    def test_invoke_rejects_invalid_parameters(self, mock_run):
        result = GitCommandTool().invoke({"args": "log --all"})

        assert result.success is False
        assert "Invalid parameters for git_command" in result.error_message
        mock_run.assert_not_called()


@pytest.mark.unit
class TestToolResult:
    """ToolResult 단위 테스트"""

    def test_raise_for_error_returns_self(self):
        result = ToolResult(success=True, data={"stdout": "ok"})

        assert result.raise_for_error() is result

    def test_raise_for_error_without_command(self):
        with pytest.raises(GitCommandError, match="Git command failed: unknown error"):
            ToolResult(success=False, data=None).raise_for_error()

    def test_stdout_of_non_dict_data(self):
        assert ToolResult(success=True, data=None).stdout == ""
