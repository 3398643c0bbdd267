#!/usr/bin/env python3

import pytest

from benchmine.discovery import CacheDiscovery, DiscoveryPolicy, ExactSearchDiscovery
from benchmine.symbols import DeclKind
from fakes import fn, key, typedef


@pytest.fixture
def project(fake_project):
    fake_project.add_file(
        "main.c",
        fn("main", "int main(void) { return helper(); }", "helper", ("Point", DeclKind.TYPEDEF)),
    )
    fake_project.add_file(
        "util.c",
        fn("helper", "int helper(void) { return 1; }"),
        fn("unused", "int unused(void) { return 2; }"),
    )
    fake_project.add_file("lib/types.c", typedef("Point", "typedef struct { int x; } Point"))
    return fake_project


def test_policy_from_flag():
    assert DiscoveryPolicy.from_cache_flag(True) == DiscoveryPolicy.CACHE
    assert DiscoveryPolicy.from_cache_flag(False) == DiscoveryPolicy.EXACT
    assert isinstance(DiscoveryPolicy.CACHE.strategy(), CacheDiscovery)
    assert isinstance(DiscoveryPolicy.EXACT.strategy(), ExactSearchDiscovery)


class TestCacheMode:
    def test_pops_files_until_found(self, project):
        ws = project.workspace("main.c", "main")
        ws.discover_root()
        assert [p.name for p in ws.candidates] == ["util.c", "types.c"]

        ws.discover_candidates(key("helper"))
        assert key("helper") in ws.decls
        assert [p.name for p in ws.candidates] == ["types.c"]
        # Everything else in util.c came along with it.
        assert key("unused") in ws.decls

    def test_rediscovery_is_a_noop(self, project):
        ws = project.workspace("main.c", "main")
        ws.discover_root()
        ws.discover_candidates(key("helper"))

        decls = dict(ws.decls)
        candidates = list(ws.candidates)
        parsed = len(project.parsed)
        ws.discover_candidates(key("helper"))
        ws.discover_candidates(key("unused"))
        assert ws.decls == decls
        assert list(ws.candidates) == candidates
        assert len(project.parsed) == parsed

    def test_each_file_parsed_once(self, project):
        ws = project.workspace("main.c", "main")
        ws.discover_root()
        ws.discover_candidates(key("Point", DeclKind.TYPEDEF))
        ws.discover_candidates(key("ghost"))
        assert len(project.parsed) == len(set(project.parsed)) == 3

    def test_exhausted_queue_ignores_symbol(self, project):
        ws = project.workspace("main.c", "main")
        ws.discover_root()
        ws.discover_candidates(key("ghost"))
        assert not ws.candidates
        assert key("ghost") in ws.ignored
        assert key("ghost") not in ws.decls

    def test_queue_never_grows(self, project):
        ws = project.workspace("main.c", "main")
        sizes = [len(ws.candidates)]
        ws.discover_root()
        sizes.append(len(ws.candidates))
        for name in ["helper", "ghost", "unused"]:
            ws.discover_candidates(key(name))
            sizes.append(len(ws.candidates))
        assert sizes == sorted(sizes, reverse=True)


class TestExactSearchMode:
    def test_indexes_only_the_searched_symbol(self, project):
        ws = project.workspace("main.c", "main", cache=False)
        ws.discover_root()
        ws.discover_candidates(key("helper"))
        assert key("helper") in ws.decls
        assert key("unused") not in ws.decls
        assert len(ws.candidates) == 2

    def test_files_are_revisited(self, project):
        ws = project.workspace("main.c", "main", cache=False)
        ws.discover_root()
        ws.discover_candidates(key("helper"))
        ws.discover_candidates(key("unused"))
        assert key("unused") in ws.decls
        util = (project.root / "util.c").resolve()
        assert project.parsed.count(util) == 2

    def test_missing_symbol_scans_every_candidate(self, project):
        ws = project.workspace("main.c", "main", cache=False)
        ws.discover_root()
        before = len(project.parsed)
        ws.discover_candidates(key("ghost"))
        assert len(project.parsed) - before == 2
        assert key("ghost") in ws.ignored
        assert len(ws.candidates) == 2

    def test_rediscovery_is_a_noop(self, project):
        ws = project.workspace("main.c", "main", cache=False)
        ws.discover_root()
        ws.discover_candidates(key("helper"))
        parsed = len(project.parsed)
        ws.discover_candidates(key("helper"))
        assert len(project.parsed) == parsed
