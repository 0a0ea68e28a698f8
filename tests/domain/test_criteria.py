from __future__ import annotations

import uuid

from crmrecords.domain.ports.persistence import Criteria
from tests.helpers.records import make_opportunity


def test_where_and_including_combine() -> None:
    account_id = uuid.uuid4()
    criteria = Criteria.where(account_id=account_id).including(name={"A", "B"})

    assert criteria.fields() == {"account_id", "name"}
    assert criteria.matches(make_opportunity("A", account_id=account_id))
    assert not criteria.matches(make_opportunity("C", account_id=account_id))
    assert not criteria.matches(make_opportunity("A", account_id=uuid.uuid4()))


def test_including_does_not_mutate_original() -> None:
    base = Criteria.where(name="A")
    extended = base.including(stage=["Prospecting"])

    assert base.any_of == {}
    assert extended.equals == {"name": "A"}


def test_empty_criteria_matches_everything() -> None:
    assert Criteria().matches(make_opportunity(None))


def test_empty_membership_matches_nothing() -> None:
    assert not Criteria().including(name=[]).matches(make_opportunity("A"))
