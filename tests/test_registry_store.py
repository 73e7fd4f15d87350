import pytest
from sqlalchemy.exc import IntegrityError

from conftest import make_record
from core.exceptions import DuplicateCodeError, PrefixConflictError
from models import HeadquarterIndex
from services.registry_store import SQLRegistryStore


def test_insert_and_find_by_code(store):
    store.insert(make_record("CHASUS33XXX", branches=["CHASUS33BRN"]))

    record = store.find_by_code("CHASUS33XXX")
    assert record.isHeadquarter is True
    assert record.branches == ["CHASUS33BRN"]
    assert record.codeType == "UNKNOWN"
    assert store.find_by_code("CHASUS33ZZZ") is None


def test_insert_duplicate_code(store):
    store.insert(make_record("CHASUS33BRN"))
    with pytest.raises(DuplicateCodeError):
        store.insert(make_record("CHASUS33BRN", name="Another"))
    assert store.find_by_code("CHASUS33BRN").name == "Test Bank"


def test_prefix_index_allows_one_headquarters(store, session):
    store.insert(make_record("CHASUS33XXX"))
    with pytest.raises(PrefixConflictError):
        store.insert(make_record("CHASUS33XXXX"))

    # The rejected headquarters is not half-inserted
    assert store.find_by_code("CHASUS33XXXX") is None
    assert session.get(HeadquarterIndex, "CHASUS33").headquarter_code == "CHASUS33XXX"


def test_find_by_prefix(store):
    store.insert(make_record("CHASUS33BRN"))
    assert store.find_by_prefix("CHASUS33") is None
    assert store.find_by_prefix("CHASUS33", is_headquarter=False).swiftCode == "CHASUS33BRN"

    store.insert(make_record("CHASUS33XXX"))
    assert store.find_by_prefix("CHASUS33").swiftCode == "CHASUS33XXX"


def test_find_branches_by_prefix_excludes_headquarters(store):
    for code in ("CHASUS33XXX", "CHASUS33SFC", "CHASUS33BRN", "CHASUS34BRN"):
        store.insert(make_record(code))
    assert [r.swiftCode for r in store.find_branches_by_prefix("CHASUS33")] == ["CHASUS33BRN", "CHASUS33SFC"]


def test_find_by_codes_keeps_requested_order(store):
    for code in ("CHASUS33BRN", "CHASUS33SFC"):
        store.insert(make_record(code))
    found = store.find_by_codes(["CHASUS33SFC", "MISSING0", "CHASUS33BRN"])
    assert [r.swiftCode for r in found] == ["CHASUS33SFC", "CHASUS33BRN"]
    assert store.find_by_codes([]) == []


def test_find_by_country_is_case_insensitive(store):
    store.insert(make_record("DEUTDEFFXXX", country="DE"))
    store.insert(make_record("CHASUS33XXX"))
    assert [r.swiftCode for r in store.find_by_country("de")] == ["DEUTDEFFXXX"]
    assert store.find_by_country("DE") == store.find_by_country(" de ")


def test_add_branch_has_set_semantics(store):
    store.insert(make_record("CHASUS33XXX"))
    assert store.add_branch("CHASUS33XXX", "CHASUS33BRN") is True
    assert store.add_branch("CHASUS33XXX", "CHASUS33BRN") is False
    assert store.add_branch("CHASUS33XXX", "CHASUS33SFC") is True
    assert store.find_by_code("CHASUS33XXX").branches == ["CHASUS33BRN", "CHASUS33SFC"]


def test_add_branch_reraises_integrity_errors_other_than_duplicates(session):
    class UnlinkedStore(SQLRegistryStore):
        def _is_linked(self, headquarter_code, branch_code):
            return False

    store = UnlinkedStore(session)
    store.insert(make_record("CHASUS33XXX"))
    assert store.add_branch("CHASUS33XXX", "CHASUS33BRN") is True
    with pytest.raises(IntegrityError):
        store.add_branch("CHASUS33XXX", "CHASUS33BRN")

    # The failed insert is rolled back and the session stays usable
    assert store.find_by_code("CHASUS33XXX").branches == ["CHASUS33BRN"]


def test_remove_branch_filters_by_code(store):
    store.insert(make_record("CHASUS33XXX", branches=["CHASUS33BRN", "CHASUS33SFC", "CHASUS33NYC"]))
    assert store.remove_branch("CHASUS33XXX", "CHASUS33SFC") is True
    assert store.remove_branch("CHASUS33XXX", "CHASUS33SFC") is False
    assert store.find_by_code("CHASUS33XXX").branches == ["CHASUS33BRN", "CHASUS33NYC"]


def test_update_branch_list_replaces_and_deduplicates(store):
    store.insert(make_record("CHASUS33XXX", branches=["CHASUS33BRN"]))
    store.update_branch_list("CHASUS33XXX", ["CHASUS33SFC", "CHASUS33NYC", "CHASUS33SFC"])
    assert store.find_by_code("CHASUS33XXX").branches == ["CHASUS33SFC", "CHASUS33NYC"]


def test_delete_headquarters_frees_prefix_but_keeps_branches(store):
    store.insert(make_record("CHASUS33BRN"))
    store.insert(make_record("CHASUS33XXX", branches=["CHASUS33BRN"]))

    assert store.delete("CHASUS33XXX") == 1
    assert store.find_by_prefix("CHASUS33") is None
    assert store.find_by_code("CHASUS33BRN") is not None

    # A new headquarters can claim the prefix again
    store.insert(make_record("CHASUS33XXX"))
    assert store.find_by_code("CHASUS33XXX").branches == []


def test_delete_headquarters_repoints_index_to_remaining_headquarters(store, session):
    store.replace_all([make_record("CHASUS33XXX"), make_record("CHASUS33XXXX")])
    assert store.find_by_prefix("CHASUS33").swiftCode == "CHASUS33XXXX"

    assert store.delete("CHASUS33XXXX") == 1
    assert session.get(HeadquarterIndex, "CHASUS33").headquarter_code == "CHASUS33XXX"
    with pytest.raises(PrefixConflictError):
        store.insert(make_record("CHASUS33YXXX"))


def test_delete_missing_code(store):
    assert store.delete("NOTTHERE1") == 0


def test_replace_all(store):
    store.insert(make_record("OLDBANK1XXX"))
    count = store.replace_all([
        make_record("CHASUS33XXX", branches=["CHASUS33BRN"]),
        make_record("CHASUS33BRN"),
        make_record("DEUTDEFFBER", country="DE"),
    ])

    assert count == 3
    assert store.find_by_code("OLDBANK1XXX") is None
    assert store.find_by_prefix("OLDBANK1") is None
    assert store.find_by_prefix("CHASUS33").branches == ["CHASUS33BRN"]
    assert store.find_by_country("DE")[0].swiftCode == "DEUTDEFFBER"
