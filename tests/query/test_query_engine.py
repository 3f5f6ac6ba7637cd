"""질의 엔진 테스트 모듈"""

import pytest

from svn_ticket_log.commit_graph import CommitGraph, TicketId
from svn_ticket_log.config.settings import LogMiningConfig
from svn_ticket_log.exceptions import UnknownCommitError
from svn_ticket_log.query import QueryEngine, RefTip
from svn_ticket_log.reporting import ReportWriter


def ticket_values(tickets):
    return [ticket.value for ticket in tickets]


@pytest.fixture
def history(commit_factory):
    """base(r1) 에서 갈라진 세 브랜치와 구조적 머지

    - main: fix (PROJ-9)
    - dev: dev1 (PROJ-10)
    - release: pick (fix 를 옮겨 옴, 티켓 문구 없음)
    - merge: fix + dev1 머지
    """
    fix_id = commit_factory.id("fix")
    commits = [
        commit_factory("base", "Initial import", svn_revision=1, paths=("README",)),
        commit_factory("fix", "PROJ-9 Fix crash", ("base",), svn_revision=2, paths=("src/app.py",)),
        commit_factory("dev1", "PROJ-10 Dev work", ("base",), svn_revision=3, paths=("src/dev.py",)),
        commit_factory("pick", f"Port {fix_id} to release", ("base",), svn_revision=4, paths=("src/app.py",)),
        commit_factory("merge", "Merge branch 'dev'", ("fix", "dev1")),
    ]
    return CommitGraph.build(commit_factory.newest_first(commits))


@pytest.fixture
def refs(commit_factory):
    return [
        RefTip("main", commit_factory.id("fix")),
        RefTip("dev", commit_factory.id("dev1")),
        RefTip("release", commit_factory.id("pick")),
        RefTip("v1.0", commit_factory.id("fix"), is_tag=True),
    ]


@pytest.mark.unit
class TestListCommits:
    """list 질의 테스트"""

    def test_groups_and_merge_exclusion(self, history, commit_factory):
        engine = QueryEngine(history)
        ids = [commit_factory.id(name) for name in ("merge", "fix", "dev1", "base", "fix")]

        result = engine.list_commits(ids)

        assert [c.id for c in result.commits] == [commit_factory.id(n) for n in ("fix", "dev1", "base")]
        assert result.excluded_merge_ids == (commit_factory.id("merge"),)
        assert ticket_values(result.tickets) == ["PROJ-9", "PROJ-10"]
        assert [g.ticket for g in result.groups][-1] is None
        assert [c.id for c in result.groups[-1].commits] == [commit_factory.id("base")]

    def test_include_merge_commits(self, history, commit_factory):
        engine = QueryEngine(history, history.config.with_overrides(include_merge_commits=True))

        result = engine.list_commits([commit_factory.id("merge")])

        assert [c.id for c in result.commits] == [commit_factory.id("merge")]
        assert result.excluded_merge_ids == ()

    def test_reference_tree(self, history, commit_factory):
        """포함된 커밋이 참조하는 커밋이 하위 노드"""
        result = QueryEngine(history).list_commits([commit_factory.id("pick")])

        tree = result.commits[0]
        assert [child.id for child in tree.related] == [commit_factory.id("fix")]
        assert ticket_values(tree.commit.sorted_tickets()) == ["PROJ-9"]
        assert len(tree.flatten()) == 2

    def test_unknown_commit(self, history):
        with pytest.raises(UnknownCommitError):
            QueryEngine(history).list_commits(["0000000"])

    def test_to_dict(self, history, commit_factory):
        data = QueryEngine(history).list_commits([commit_factory.id("fix")]).to_dict()

        assert data['tickets'] == ["PROJ-9"]
        assert data['commits'][0]['svn_revision'] == 2


@pytest.fixture
def diverged(commit_factory):
    """a 브랜치의 a1 을 b 브랜치에 체리픽한 이력"""
    a1 = commit_factory.id("a1")
    commits = [
        commit_factory("root", "root", paths=("README",)),
        commit_factory("a1", "PROJ-1 Feature", ("root",), paths=("docs/feature.md",)),
        commit_factory("a2", "PROJ-2 More", ("a1",), paths=("src/a.py",)),
        commit_factory("b1", f"PROJ-1 Feature\n\n(cherry picked from commit {a1})", ("root",),
                       paths=("docs/feature.md",)),
        commit_factory("b2", "PROJ-3 Other", ("b1",), paths=("src/b.py",)),
    ]
    return CommitGraph.build(commit_factory.newest_first(commits))


@pytest.mark.unit
class TestCompare:
    """compare 질의 테스트"""

    def test_cherry_picks_are_deduplicated(self, diverged, commit_factory):
        """양쪽에 같은 변경이 있으면 양쪽에서 모두 제외"""
        result = QueryEngine(diverged).compare(commit_factory.id("a2"), commit_factory.id("b2"), "a", "b")

        assert [c.id for c in result.only_a] == [commit_factory.id("a2")]
        assert [c.id for c in result.only_b] == [commit_factory.id("b2")]
        assert result.removed_a == (commit_factory.id("a1"),)
        assert result.removed_b == (commit_factory.id("b1"),)
        assert ticket_values(result.tickets_only_a) == ["PROJ-2"]
        assert ticket_values(result.tickets_only_b) == ["PROJ-3"]
        assert result.tickets_both == ()

    def test_include_cherry_picks(self, diverged, commit_factory):
        config = diverged.config.with_overrides(include_cherry_picks=True)

        result = QueryEngine(diverged, config).compare(commit_factory.id("a2"), commit_factory.id("b2"))

        assert result.commit_ids_a == {commit_factory.id("a1"), commit_factory.id("a2")}
        assert result.commit_ids_b == {commit_factory.id("b1"), commit_factory.id("b2")}
        assert ticket_values(result.tickets_both) == ["PROJ-1"]
        assert result.removed_a == () and result.removed_b == ()

    def test_symmetric(self, diverged, commit_factory):
        """compare(a, b) 와 compare(b, a) 는 양쪽만 바뀐 결과"""
        engine = QueryEngine(diverged)
        a2, b2 = commit_factory.id("a2"), commit_factory.id("b2")

        assert engine.compare(b2, a2) == engine.compare(a2, b2).swapped()

    def test_same_tip_is_empty(self, diverged, commit_factory):
        result = QueryEngine(diverged).compare(commit_factory.id("a2"), commit_factory.id("a2"))

        assert result.only_a == () and result.only_b == ()

    def test_paths_filter(self, diverged, commit_factory):
        """경로를 지정하면 해당 경로를 변경한 커밋만 비교"""
        result = QueryEngine(diverged).compare(
            commit_factory.id("a2"), commit_factory.id("b2"), paths=["src/"]
        )

        assert [c.id for c in result.only_a] == [commit_factory.id("a2")]
        assert [c.id for c in result.only_b] == [commit_factory.id("b2")]
        assert result.removed_a == ()

    def test_groups(self, diverged, commit_factory):
        result = QueryEngine(diverged).compare(commit_factory.id("a2"), commit_factory.id("b2"))

        assert [g.ticket for g in result.groups_a] == [TicketId("PROJ-2")]
        assert result.name_a == commit_factory.id("a2")

    def test_unknown_tip(self, diverged):
        with pytest.raises(UnknownCommitError):
            QueryEngine(diverged).compare("0000000", "1111111")


@pytest.mark.unit
class TestSearch:
    """search 질의 테스트"""

    def test_matching_refs(self, history, refs, commit_factory):
        report = QueryEngine(history).search(["PROJ-9"], refs)

        assert report.matching_refs == ["main", "release"]
        assert [r.ref_name for r in report.results] == ["main", "dev", "release"]
        assert not report.result_for("dev").matched
        assert report.result_for("main").total_commits_considered == 2
        assert report.result_for("release").matching_commit_ids == (commit_factory.id("pick"),)
        assert report.missing_tickets == frozenset()

    def test_back_reference_trees(self, history, refs, commit_factory):
        """직접 일치 커밋과 그 커밋을 참조하는 커밋"""
        report = QueryEngine(history).search(["PROJ-9"], refs)

        assert [tree.id for tree in report.matching_commits] == [commit_factory.id("fix")]
        assert [child.id for child in report.matching_commits[0].related] == [commit_factory.id("pick")]

    def test_ref_groups(self, history, refs, commit_factory):
        config = history.config.with_overrides(include_tags=True)

        report = QueryEngine(history, config).search(["PROJ-9"], refs)

        assert report.result_for("v1.0").is_tag
        assert [group.ref_names for group in report.ref_groups] == [("main", "v1.0"), ("release",)]
        assert report.ref_groups[0].commit_ids == (commit_factory.id("fix"),)

    def test_targets_are_case_insensitive(self, history, refs):
        report = QueryEngine(history).search(["proj-9", TicketId("PROJ-404")], refs)

        assert report.matching_refs == ["main", "release"]
        assert ticket_values(report.missing_tickets) == ["PROJ-404"]

    def test_revision_floor(self, history, refs):
        config = history.config.with_overrides(revision_floor=2)

        report = QueryEngine(history, config).search(["PROJ-9"], refs)

        assert report.result_for("main").total_commits_considered == 1
        assert report.matching_refs == ["main", "release"]

    def test_no_match(self, history, refs):
        report = QueryEngine(history).search(["PROJ-1"], refs)

        assert report.matching_refs == []
        assert report.ref_groups == ()
        assert report.to_dict()['missing_tickets'] == ["PROJ-1"]

    def test_unknown_ref_tip(self, history):
        with pytest.raises(UnknownCommitError):
            QueryEngine(history).search(["PROJ-9"], [RefTip("gone", "0000000")])

    def test_uses_engine_config(self, history, refs):
        engine = QueryEngine(history, LogMiningConfig(include_tags=True))

        assert len(engine.search(["PROJ-9"], refs).results) == 4


CHAIN_LENGTH = 2000


@pytest.fixture
def long_chain(commit_factory):
    """각 커밋이 바로 앞 리비전을 언급하는 긴 참조 사슬 (c1 만 PROJ-1)"""
    commits = [commit_factory("c1", "PROJ-1 Start", svn_revision=1)]
    for revision in range(2, CHAIN_LENGTH + 1):
        commits.append(commit_factory(
            f"c{revision}", f"Follow-up to r{revision - 1}", (f"c{revision - 1}",), svn_revision=revision
        ))
    return CommitGraph.build(commit_factory.newest_first(commits))


@pytest.mark.unit
class TestLongReferenceChain:
    """재귀 한도보다 긴 참조 사슬 테스트"""

    def test_list_builds_whole_tree(self, long_chain, commit_factory):
        tip = commit_factory.id(f"c{CHAIN_LENGTH}")

        result = QueryEngine(long_chain).list_commits([tip])

        tree = result.commits[0]
        assert ticket_values(tree.commit.sorted_tickets()) == ["PROJ-1"]
        flattened = tree.flatten()
        assert len(flattened) == CHAIN_LENGTH
        assert flattened[-1].id == commit_factory.id("c1")

        # 하위 트리는 깊이/상위 커밋과 함께 펼쳐진 목록
        related = result.to_dict()['commits'][0]['related']
        assert len(related) == CHAIN_LENGTH - 1
        assert related[-1]['depth'] == CHAIN_LENGTH - 1
        assert related[0]['parent'] == tip

        lines = ReportWriter(LogMiningConfig(hash_length=7), show_commits=True).render_list(result).splitlines()
        assert "\t" * CHAIN_LENGTH + f"- `{commit_factory.id('c1')[:7]}`" in lines

    def test_search_back_reference_tree(self, long_chain, commit_factory):
        refs = [RefTip("trunk", commit_factory.id(f"c{CHAIN_LENGTH}"))]

        report = QueryEngine(long_chain).search(["PROJ-1"], refs)

        assert [tree.id for tree in report.matching_commits] == [commit_factory.id("c1")]
        assert len(report.matching_commits[0].flatten()) == CHAIN_LENGTH
        assert report.matching_refs == ["trunk"]
