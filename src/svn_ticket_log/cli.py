"""CLI 진입점

git-svn 변환 저장소의 커밋 로그를 분석하는 명령행 인터페이스를 제공합니다.
"""

import argparse
import logging
import shlex
import sys
from typing import List, Optional, Sequence

from svn_ticket_log.commit_graph.commit_graph import CommitGraph
from svn_ticket_log.exceptions import (
    GitCommandError,
    LogParseError,
    MalformedTicketPatternError,
    UnknownCommitError,
)
from svn_ticket_log.query.query_engine import QueryEngine
from svn_ticket_log.reporting.report_writer import OUTPUT_FORMATS, ReportWriter, write_output
from svn_ticket_log.retrieval.git_log_reader import GitLogReader
from svn_ticket_log.revision_map.revision_map_writer import (
    render_markdown_list,
    render_markdown_table,
    write_binary,
)

from .config.settings import LogMiningConfig, get_default_config, get_default_config_path, load_config

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO",
                  log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s") -> None:
    """로깅 설정

    결과는 표준 출력으로 나가므로 로그는 표준 에러로 보냅니다.

    Args:
        level: 로그 레벨
        log_format: 로그 형식
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def split_shell_words(values: Optional[Sequence[str]]) -> List[str]:
    """``"abc def", "ghi"`` -> ``["abc", "def", "ghi"]``"""
    words: List[str] = []
    for value in values or ():
        words.extend(shlex.split(value))
    return words


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svn-ticket-log",
        description="git-svn 변환 저장소의 티켓/커밋 분석 도구",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
사용 예시:
  svn-ticket-log list release/1.0..main           # 범위의 티켓 목록
  svn-ticket-log compare main release/1.0 -s      # 두 브랜치 비교 (커밋 표시)
  svn-ticket-log search PROJ-123 "PROJ-9 PROJ-10" # 티켓이 포함된 브랜치 검색
  svn-ticket-log revmap --binary .rev_map --markdown revmap.md
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=get_default_config_path(),
        help="설정 파일 경로 (기본값: ./svn-ticket-log.yml 또는 패키지 기본 설정)"
    )
    parser.add_argument(
        "--repo", "-r",
        type=str,
        default=".",
        help="git 저장소 경로 (기본값: 현재 디렉토리)"
    )
    parser.add_argument(
        "--log-level", "-l",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="로그 레벨 (기본값: 설정 파일의 값)"
    )
    parser.add_argument(
        "--format", "-f",
        dest="output_format",
        type=str,
        default="markdown",
        choices=list(OUTPUT_FORMATS),
        help="출력 형식 (기본값: markdown)"
    )
    parser.add_argument("--output", "-o", type=str, default=None, help="결과 파일 경로 (기본값: 표준 출력)")
    parser.add_argument("--hash-length", type=int, default=None, help="출력할 커밋 해시 길이")
    parser.add_argument("--ticket-prefix", type=str, default=None,
                        help="티켓 앞에 붙일 접두어 또는 {ticket} 을 포함한 URL 템플릿")
    parser.add_argument("--ticket-project", action="append", default=None,
                        help="인정할 티켓 프로젝트 키 (여러 번 지정 가능)")
    parser.add_argument("--leading-only", action="store_true", default=None,
                        help="요약 줄 맨 앞의 티켓만 인정")
    parser.add_argument("--no-upstream", action="store_true", help="원격 브랜치 우선 해석 끄기")
    parser.add_argument("--verbose", "-v", action="store_true", default=None,
                        help="해석하지 못한 참조를 경고로 표시")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="revspec 범위의 티켓과 커밋 목록")
    list_parser.add_argument("revspec", help="예: release/1.0..main")
    list_parser.add_argument("--path", "-p", action="append", help="해당 경로를 변경한 커밋만")
    list_parser.add_argument("--include-merge-commits", "-m", action="store_true", default=None)
    list_parser.add_argument("--show-commits", "-s", action="store_true")

    compare_parser = subparsers.add_parser("compare", help="두 ref 에만 있는 티켓 비교")
    compare_parser.add_argument("object_a")
    compare_parser.add_argument("object_b")
    compare_parser.add_argument("--path", "-p", action="append", help="해당 경로를 변경한 커밋만")
    compare_parser.add_argument("--include-merge-commits", "-m", action="store_true", default=None)
    compare_parser.add_argument("--include-cherry-picks", action="store_true", default=None,
                                help="양쪽에 중복된 체리픽/머지 커밋도 유지")
    compare_parser.add_argument("--show-commits", "-s", action="store_true")

    search_parser = subparsers.add_parser("search", help="티켓이 포함된 브랜치/태그 검색")
    search_parser.add_argument("tickets", nargs="+", help="찾을 티켓 (공백으로 여러 개 지정 가능)")
    search_parser.add_argument("--include-tags", "-t", action="store_true", default=None)
    search_parser.add_argument("--revision-floor", type=int, default=None,
                               help="이 SVN 리비전보다 오래된 커밋은 검색하지 않음")

    revmap_parser = subparsers.add_parser("revmap", help="SVN 리비전 맵 생성")
    revmap_parser.add_argument("--binary", type=str, default=None, help="git-svn .rev_map 형식 파일 경로")
    revmap_parser.add_argument("--markdown", type=str, default=None, help="Markdown 파일 경로")
    revmap_parser.add_argument("--basic", action="store_true", help="표 대신 간단한 목록 형식")
    revmap_parser.add_argument("--descending", action="store_true", default=None, help="리비전 내림차순")
    revmap_parser.add_argument("--no-summary", action="store_true", help="요약 열 제외")

    return parser


def resolve_config(args: argparse.Namespace) -> LogMiningConfig:
    """설정 파일과 CLI 인자를 합친 실행 설정"""
    config = load_config(args.config) if args.config else get_default_config()

    overrides = {
        'hash_length': args.hash_length,
        'ticket_prefix': args.ticket_prefix,
        'ticket_projects': args.ticket_project,
        'leading_ticket_only': args.leading_only,
        'verbose': args.verbose,
        'include_merge_commits': getattr(args, 'include_merge_commits', None),
        'include_cherry_picks': getattr(args, 'include_cherry_picks', None),
        'include_tags': getattr(args, 'include_tags', None),
        'revision_floor': getattr(args, 'revision_floor', None),
        'markdown_descending': getattr(args, 'descending', None),
    }
    if args.no_upstream:
        overrides['prefer_upstream'] = False
    if getattr(args, 'no_summary', False):
        overrides['markdown_summary'] = False

    # model_copy 는 검증을 건너뛰므로 다시 검증
    merged = config.with_overrides(**overrides)
    return LogMiningConfig.model_validate(merged.model_dump())


def run_command(args: argparse.Namespace, config: LogMiningConfig) -> None:
    reader = GitLogReader(args.repo, config)
    graph = CommitGraph.build(reader.read_all_commits(), config)
    engine = QueryEngine(graph, config)
    writer = ReportWriter(config, args.output_format, getattr(args, 'show_commits', False))

    if args.command == "list":
        commit_ids = reader.commit_ids(args.revspec, split_shell_words(args.path))
        result = engine.list_commits(commit_ids)
        write_output(writer.render_list(result, args.revspec), args.output)

    elif args.command == "compare":
        result = engine.compare(
            reader.resolve_ref(args.object_a),
            reader.resolve_ref(args.object_b),
            name_a=args.object_a,
            name_b=args.object_b,
            paths=split_shell_words(args.path),
        )
        write_output(writer.render_compare(result), args.output)

    elif args.command == "search":
        report = engine.search(split_shell_words(args.tickets), reader.list_refs())
        write_output(writer.render_search(report), args.output)

    elif args.command == "revmap":
        revision_map = graph.revision_map
        if args.binary:
            write_binary(revision_map, args.binary)
        summaries = {record.id: record.summary for record in graph.records}
        if args.basic:
            text = render_markdown_list(revision_map, config.hash_length, config.markdown_descending)
        else:
            text = render_markdown_table(revision_map, config, summaries)
        if args.markdown:
            write_output(text, args.markdown)
        elif not args.binary:
            write_output(text, args.output)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """메인 함수"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValueError) as e:
        setup_logging(args.log_level or "INFO")
        print(f"[ERROR] 설정을 로드할 수 없습니다: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(args.log_level or config.logging.level, config.logging.format)
    logger.debug(f"실행 설정: {config.model_dump()}")

    try:
        run_command(args, config)
    except (GitCommandError, LogParseError, UnknownCommitError, MalformedTicketPatternError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n[EXIT] 중단되었습니다.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
