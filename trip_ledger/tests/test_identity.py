"""
Unified transaction id tests.
"""

import pytest

from trip_ledger.app.core.exceptions import MalformedIdError, UnknownStoreError
from trip_ledger.app.domain.ledger.identity import MAX_LOCAL_ID, StoreTag, UnifiedTransactionId, decode, encode
from trip_ledger.app.models.trip_enums import TripType


def test_encode_decode_round_trip():
    for store in StoreTag:
        for local_id in (1, 42, 987654):
            uid = decode(encode(store, local_id))
            assert uid == UnifiedTransactionId(store, local_id)


def test_same_local_id_in_both_stores_never_collides():
    assert encode(StoreTag.FIXED, 7) == "FIX-7"
    assert encode(StoreTag.ADHOC, 7) == "ADH-7"
    assert encode(StoreTag.FIXED, 7) != encode(StoreTag.ADHOC, 7)


def test_decode_is_case_insensitive_on_prefix():
    assert decode("fix-12") == UnifiedTransactionId(StoreTag.FIXED, 12)
    assert decode(" Adh-3 ") == UnifiedTransactionId(StoreTag.ADHOC, 3)


@pytest.mark.parametrize("value", ["12", 12, "", "FIX", "FIX-", "FIX-0", "FIX-01", "FIX--1", "FIX-1.5", "FIX-1-2", None])
def test_decode_rejects_malformed_ids(value):
    with pytest.raises(MalformedIdError) as exc_info:
        decode(value)
    assert exc_info.value.error_code == "ERR_ID_001"


def test_decode_rejects_unknown_store():
    with pytest.raises(UnknownStoreError) as exc_info:
        decode("REP-5")
    assert exc_info.value.error_code == "ERR_ID_002"
    assert exc_info.value.status_code == 400


@pytest.mark.parametrize("local_id", [0, -3, True, "5", 2.0, 2 ** 31])
def test_encode_requires_positive_int(local_id):
    with pytest.raises(ValueError):
        encode(StoreTag.FIXED, local_id)


def test_store_for_trip_type():
    assert StoreTag.for_trip_type(TripType.FIXED) is StoreTag.FIXED
    assert StoreTag.for_trip_type(TripType.ADHOC) is StoreTag.ADHOC
    assert StoreTag.for_trip_type(TripType.REPLACEMENT) is StoreTag.ADHOC


def test_fixed_ranks_before_adhoc():
    assert StoreTag.FIXED.sort_rank < StoreTag.ADHOC.sort_rank


def test_largest_store_key_round_trips():
    assert decode(f"ADH-{MAX_LOCAL_ID}") == UnifiedTransactionId(StoreTag.ADHOC, 2147483647)


@pytest.mark.parametrize("value", ["FIX-2147483648", "ADH-99999999999999999999", "FIX-" + "9" * 5000])
def test_decode_rejects_keys_beyond_integer_range(value):
    with pytest.raises(MalformedIdError):
        decode(value)
