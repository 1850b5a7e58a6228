from directory_core.store.membership import membership_rows, plan_membership


def test_plan_adds_and_removes_difference():
    plan = plan_membership(["b1", "b2"], ["b2", "b3"])

    assert plan.to_add == {"b3"}
    assert plan.to_remove == {"b1"}
    assert not plan.is_noop


def test_plan_empty_desired_removes_everything():
    plan = plan_membership(["b1", "b2"], [])

    assert plan.to_add == frozenset()
    assert plan.to_remove == {"b1", "b2"}


def test_plan_same_sets_is_noop():
    assert plan_membership(["b1", "b2"], ["b2", "b1", "b1"]).is_noop
    assert plan_membership([], []).is_noop


def test_membership_rows_one_per_supplied_id():
    rows = membership_rows("m1", ["b2", "b1", "b2"])

    assert rows == [
        {"member_id": "m1", "band_id": "b2"},
        {"member_id": "m1", "band_id": "b1"},
        {"member_id": "m1", "band_id": "b2"},
    ]


def test_membership_rows_empty():
    assert membership_rows("m1", []) == []
