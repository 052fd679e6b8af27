"""Tests for record indices and supersession chains"""

import pytest

from refedit.core.errors import NotFound
from refedit.core.indices import RecordIndex, by_category, by_id, of_kind
from refedit.core.models import Kind
from refedit.core.resolver import SupersessionResolver


@pytest.fixture
def resolver(doc):
    return SupersessionResolver(RecordIndex(doc))


class TestIndices:
    """Tests for lookups."""

    def test_by_id(self, doc):
        assert by_id(doc.active_solutions(), "sp3000").name == "Intel Wireless Network Driver"
        assert by_id(doc.active_solutions(), "sp1999") is None
        assert by_id(doc.superseded_solutions(), "sp1999").version == "1.9.5"

    def test_by_category(self, doc):
        drivers = by_category(doc.active_solutions(), of_kind(Kind.DRIVER))
        assert [s.id for s in drivers] == ["sp1000", "sp3000"]

    def test_reverse_lookups(self, doc):
        index = RecordIndex(doc)
        assert len(index.devices_for("sp3000")) == 2
        assert len(index.uwp_for("sp2000")) == 2
        assert len(index.software_for("sp2000")) == 1
        assert index.devices_for("sp1000") == []
        assert "sp5000" in index.referenced_ids()


class TestChain:
    """Tests for walking Supersedes links."""

    def test_single_hop(self, resolver):
        chain = resolver.chain("sp2000")
        assert [s.id for s in chain] == ["sp1999"]

    def test_stops_at_missing_link(self, resolver):
        # sp2998 supersedes sp2990, which is not in the catalog
        chain = resolver.chain("sp3000")
        assert [s.id for s in chain] == ["sp2999", "sp2998"]

    def test_first_element_is_supersedes(self, doc, resolver):
        for solution in doc.active_solutions():
            chain = resolver.chain(solution.id)
            if solution.supersedes_id and chain:
                assert chain[0].id == solution.supersedes_id

    def test_no_supersedes(self, resolver):
        assert resolver.chain("sp1000") == []
        assert resolver.chain("sp5000") == []

    def test_unknown_active(self, resolver):
        with pytest.raises(NotFound):
            resolver.chain("sp1999")

    def test_cycle(self):
        from refedit.core.document import CatalogDocument
        doc = CatalogDocument.from_bytes(
            b'<ImagePal><Solutions><UpdateInfo IdRef="a"><Supersedes>b</Supersedes></UpdateInfo>'
            b'</Solutions><Solutions-Superseded>'
            b'<UpdateInfo IdRef="b"><Supersedes>c</Supersedes></UpdateInfo>'
            b'<UpdateInfo IdRef="c"><Supersedes>b</Supersedes></UpdateInfo>'
            b'</Solutions-Superseded></ImagePal>'
        )
        chain = SupersessionResolver(RecordIndex(doc)).chain("a")
        assert [s.id for s in chain] == ["b", "c"]
