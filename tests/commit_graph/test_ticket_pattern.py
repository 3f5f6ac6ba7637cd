"""티켓 패턴 및 티켓 식별자 테스트 모듈"""

import pytest

from svn_ticket_log.commit_graph.ticket_id import TicketId
from svn_ticket_log.commit_graph.ticket_pattern import TicketMatcher, build_ticket_regex, format_ticket
from svn_ticket_log.config.settings import LogMiningConfig
from svn_ticket_log.exceptions import MalformedTicketPatternError


@pytest.mark.unit
class TestTicketId:
    """TicketId 테스트"""

    def test_case_insensitive_equality(self):
        """대소문자 구분 없는 비교와 해시"""
        assert TicketId("proj-1") == TicketId("PROJ-1")
        assert hash(TicketId("proj-1")) == hash(TicketId("PROJ-1"))
        assert len({TicketId("proj-1"), TicketId("Proj-1"), TicketId("PROJ-1")}) == 1

    def test_equality_with_string(self):
        """문자열과 비교"""
        assert TicketId("PROJ-7") == "proj-7"
        assert "PROJ-7" in {TicketId("PROJ-7")}

    def test_natural_sort(self):
        """번호 자연 정렬"""
        tickets = [TicketId("PROJ-10"), TicketId("ABC-2"), TicketId("PROJ-9")]

        assert [t.value for t in sorted(tickets)] == ["ABC-2", "PROJ-9", "PROJ-10"]

    def test_project_and_number(self):
        """프로젝트 키와 번호"""
        ticket = TicketId("core_ui-42")

        assert ticket.project == "CORE_UI"
        assert ticket.number == 42

    def test_empty_is_rejected(self):
        """빈 식별자 거부"""
        with pytest.raises(ValueError):
            TicketId("  ")


@pytest.mark.unit
class TestBuildTicketRegex:
    """build_ticket_regex 테스트"""

    def test_default_pattern_requires_upper_case_key(self):
        """기본 패턴은 대문자 키만 인식"""
        regex = build_ticket_regex(LogMiningConfig())

        assert regex.findall("PROJ-1 and utf-8 and ab-12 and X-1") == ["PROJ-1"]

    def test_projects_are_case_insensitive(self):
        """프로젝트 지정 시 대소문자 무시"""
        regex = build_ticket_regex(LogMiningConfig(ticket_projects=["PROJ", "core"]))

        assert regex.findall("proj-3, CORE-4, OTHER-5") == ["proj-3", "CORE-4"]

    def test_custom_separator(self):
        """구분자 변경"""
        regex = build_ticket_regex(LogMiningConfig(ticket_projects=["PROJ"], ticket_separator="#"))

        assert regex.findall("PROJ#12 PROJ-13") == ["PROJ#12"]

    def test_zero_number_is_not_a_ticket(self):
        """0으로 시작하는 번호는 티켓이 아님"""
        regex = build_ticket_regex(LogMiningConfig())

        assert regex.findall("PROJ-0 PROJ-012") == []

    def test_custom_pattern_override(self):
        """정규식 전체 지정"""
        regex = build_ticket_regex(LogMiningConfig(ticket_pattern=r'\b(BUG\d+)\b'))

        assert regex.findall("fixes BUG123") == ["BUG123"]

    @pytest.mark.parametrize("config_values", [
        {'ticket_pattern': r'(unclosed'},
        {'ticket_pattern': r'no-group-\d+'},
        {'ticket_pattern': r'(A)-(\d+)'},
        {'ticket_separator': ''},
        {'ticket_separator': 'ab'},
        {'ticket_separator': '----'},
        {'ticket_projects': ['PROJ', '1BAD']},
        {'ticket_projects': ['has space']},
    ])
    def test_malformed_configuration_fails_fast(self, config_values):
        """잘못된 패턴 설정은 MalformedTicketPatternError"""
        with pytest.raises(MalformedTicketPatternError):
            build_ticket_regex(LogMiningConfig(**config_values))

    def test_malformed_pattern_is_a_value_error(self):
        """MalformedTicketPatternError 는 ValueError 계열"""
        with pytest.raises(ValueError):
            TicketMatcher(LogMiningConfig(ticket_pattern='['))


@pytest.mark.unit
class TestTicketMatcher:
    """TicketMatcher 테스트"""

    def test_extract_summary_and_body(self):
        """요약과 본문의 모든 티켓 (중복 제거, 등장 순서)"""
        matcher = TicketMatcher(LogMiningConfig())

        tickets = matcher.extract("PROJ-2 fix", ["also proj-3? no", "PROJ-3 and PROJ-2"])

        assert tickets == [TicketId("PROJ-2"), TicketId("PROJ-3")]

    def test_leading_only_mode(self):
        """요약 맨 앞의 티켓만 인정"""
        matcher = TicketMatcher(LogMiningConfig(leading_ticket_only=True))

        assert matcher.extract("PROJ-5: fix crash (see PROJ-6)", ["PROJ-7"]) == [TicketId("PROJ-5")]
        assert matcher.extract("Fix crash for PROJ-5", []) == []

    def test_leading_ticket_after_pull_request_prefix(self):
        """``Pull request #N`` 접두어 뒤의 티켓"""
        matcher = TicketMatcher(LogMiningConfig(leading_ticket_only=True))

        assert matcher.find_leading("Pull request #12: PROJ-8 Fix") == [TicketId("PROJ-8")]


@pytest.mark.unit
class TestFormatTicket:
    """format_ticket 테스트"""

    def test_prefix(self):
        assert format_ticket(TicketId("PROJ-1"), "#") == "#PROJ-1"

    def test_url_template(self):
        template = "https://jira.example.com/browse/{ticket}"

        assert format_ticket(TicketId("proj-1"), template) == "https://jira.example.com/browse/PROJ-1"

    def test_no_prefix(self):
        assert format_ticket(TicketId("PROJ-1")) == "PROJ-1"
