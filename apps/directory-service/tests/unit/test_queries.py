from directory_core.db import schemas
from directory_core.store import queries
from directory_core.store.state import DirectorySnapshot


def _districts():
    return [
        schemas.District(id="d1", name="North", code="D1", commission_id="c1", commission_name="Alpha"),
        schemas.District(id="d2", name="South", code="D2", commission_id="c2", commission_name="Beta"),
    ]


def _groups():
    return [
        # stale commission column; the district says c1
        schemas.Group(id="g1", name="Hill", town_name="Riverside", district_id="d1", commission_id="c2"),
        schemas.Group(id="g2", name="Vale", town_name="Lakeside", district_id="d2", commission_id="c2"),
    ]


def _bands():
    return [
        schemas.Band(id="b1", name="Brass", group_id="g1", district_id="d1", commission_id="c1"),
        schemas.Band(id="b2", name="Strings", group_id="g2", district_id="d2", commission_id="c2"),
        schemas.Band(id="b3", name="Drums", group_id="g1", district_id="d1", commission_id="c1"),
    ]


def test_search_is_case_insensitive_substring():
    found = queries.search_entity("district", _districts(), "nOR")

    assert [d.id for d in found] == ["d1"]


def test_search_matches_denormalized_parent_name():
    found = queries.search_entity("district", _districts(), "beta")

    assert [d.id for d in found] == ["d2"]


def test_blank_search_returns_everything():
    assert len(queries.search_entity("band", _bands(), "  ")) == 3
    assert len(queries.search_entity("band", _bands(), None)) == 3


def test_search_skips_missing_values():
    members = [schemas.Member(id="m1", name="Ali"), schemas.Member(id="m2", name=None, phone_number="555-12")]

    assert [m.id for m in queries.search_entity("member", members, "555")] == ["m2"]


def test_districts_for_commission():
    assert [d.id for d in queries.districts_for_commission(_districts(), "c2")] == ["d2"]
    assert len(queries.districts_for_commission(_districts(), None)) == 2


def test_groups_for_district():
    assert [g.id for g in queries.groups_for_district(_groups(), "d1")] == ["g1"]


def test_filter_groups_by_commission_goes_through_district():
    found = queries.filter_groups(_groups(), _districts(), commission_id="c1")

    assert [g.id for g in found] == ["g1"]


def test_filter_groups_by_commission_and_district():
    assert queries.filter_groups(_groups(), _districts(), commission_id="c1", district_id="d2") == []


def test_filter_bands_combines_filters():
    assert [b.id for b in queries.filter_bands(_bands(), commission_id="c1")] == ["b1", "b3"]
    assert [b.id for b in queries.filter_bands(_bands(), district_id="d1", group_id="g1")] == ["b1", "b3"]
    assert [b.id for b in queries.filter_bands(_bands(), group_id="g2")] == ["b2"]


def test_members_and_bands_by_membership():
    ali = schemas.Member(id="m1", name="Ali", band_ids=frozenset({"b1", "gone"}))
    sara = schemas.Member(id="m2", name="Sara", band_ids=frozenset({"b2"}))

    assert queries.members_of_band([ali, sara], "b1") == [ali]
    assert [b.id for b in queries.bands_of_member(_bands(), ali)] == ["b1"]


def test_directory_counts():
    snapshot = DirectorySnapshot(districts=tuple(_districts()), bands=tuple(_bands()))

    assert queries.directory_counts(snapshot) == {
        "commission": 0,
        "district": 2,
        "group": 0,
        "band": 3,
        "member": 0,
    }
