"""예외 정의

설정 오류와 외부 협력자(git, 로그 텍스트) 오류를 표현합니다.
데이터 불일치(리비전 충돌, 해석 불가 참조)는 예외가 아니라 기록 대상입니다.
"""


class MalformedTicketPatternError(ValueError):
    """티켓 패턴 설정이 잘못된 경우 (처리 시작 전에 즉시 실패)"""
    pass


class LogParseError(ValueError):
    """git log 출력 블록의 형식이 잘못된 경우"""
    pass


class UnknownCommitError(KeyError):
    """질의에 사용된 커밋 식별자를 커밋 집합에서 찾을 수 없는 경우"""

    def __str__(self):
        # KeyError 는 메시지를 repr 로 감싸므로 원래 메시지를 그대로 사용
        return str(self.args[0]) if self.args else super().__str__()


class GitCommandError(RuntimeError):
    """git 명령어 실행 실패"""
    pass
