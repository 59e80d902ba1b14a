"""Unit tests for kasten.backlinks.BacklinkIndex."""

import pytest

from kasten.backlinks import BacklinkIndex
from kasten.errors import MalformedHeaderError
from kasten.index import ZettelResult
from kasten.note import Zettel


def _ok(identity: str, body: str) -> ZettelResult:
    return ZettelResult(identity, zettel=Zettel(identity, {"title": identity}, body))


@pytest.fixture()
def index() -> BacklinkIndex:
    idx = BacklinkIndex()
    idx.build([
        _ok("a.md", "[B](b.md) [C](c.md)"),
        _ok("b.md", "[A](a.md)"),
        _ok("c.md", "no links"),
        ZettelResult("broken.md", error=MalformedHeaderError("no closing '+++' line", "broken.md")),
    ])
    return idx


class TestBacklinkIndexBuild:
    def test_backlinks(self, index: BacklinkIndex):
        assert index.backlinks("a.md") == {"b.md"}
        assert index.backlinks("b.md") == {"a.md"}
        assert index.backlinks("c.md") == {"a.md"}

    def test_links(self, index: BacklinkIndex):
        assert index.links("a.md") == {"b.md", "c.md"}
        assert index.links("c.md") == set()

    def test_every_loaded_note_is_a_node(self, index: BacklinkIndex):
        assert "c.md" in index
        assert "broken.md" not in index

    def test_failures_recorded(self, index: BacklinkIndex):
        assert set(index.failures) == {"broken.md"}
        assert isinstance(index.failures["broken.md"], MalformedHeaderError)

    def test_edges(self, index: BacklinkIndex):
        assert sorted(index.edges()) == [("a.md", "b.md"), ("a.md", "c.md"), ("b.md", "a.md")]

    def test_unknown_identity(self, index: BacklinkIndex):
        assert index.backlinks("nowhere.md") == set()
        assert index.links("nowhere.md") == set()

    def test_link_to_missing_note_is_kept(self):
        idx = BacklinkIndex()
        idx.build([_ok("a.md", "[ghost](ghost.md)")])
        assert idx.backlinks("ghost.md") == {"a.md"}

    def test_rebuild_replaces_graph(self, index: BacklinkIndex):
        index.build([_ok("x.md", "[y](y.md)")])
        assert index.backlinks("a.md") == set()
        assert index.backlinks("y.md") == {"x.md"}
        assert index.failures == {}


class TestBacklinkIndexUpdate:
    def test_gained_and_lost(self, index: BacklinkIndex):
        gained, lost = index.update("a.md", {"c.md", "d.md"})
        assert gained == {"d.md"}
        assert lost == {"b.md"}
        assert index.backlinks("b.md") == set()
        assert index.backlinks("d.md") == {"a.md"}
        assert index.backlinks("c.md") == {"a.md"}

    def test_removing_all_links(self, index: BacklinkIndex):
        index.update("b.md", set())
        assert index.backlinks("a.md") == set()
        assert "b.md" in index

    def test_unchanged(self, index: BacklinkIndex):
        assert index.update("a.md", {"b.md", "c.md"}) == (set(), set())

    def test_new_note(self, index: BacklinkIndex):
        gained, lost = index.update("new.md", {"a.md"})
        assert gained == {"a.md"}
        assert lost == set()
        assert index.backlinks("a.md") == {"b.md", "new.md"}

    def test_update_clears_failure(self, index: BacklinkIndex):
        index.update("broken.md", {"a.md"})
        assert "broken.md" not in index.failures
        assert index.backlinks("a.md") == {"b.md", "broken.md"}
