import dataclasses

import pytest
from solders.pubkey import Pubkey

from delegator_stats.errors import ConfigurationError, RetrievalError
from delegator_stats.scanner import DelegatorScanner
from delegator_stats.signatures import TOKEN_OWNER_RECORD_V1, TOKEN_OWNER_RECORD_V2

from ledger_fixtures import token_owner_record_bytes


@pytest.mark.asyncio
async def test_only_records_delegated_to_us_in_this_realm(ledger, settings, realm):

    ours_v2 = Pubkey.new_unique()
    ours_v1 = Pubkey.new_unique()

    program = realm.governance_program

    ledger.add_record(program, token_owner_record_bytes(realm.realm_id, ours_v2, delegate=settings.delegate))
    ledger.add_record(program, token_owner_record_bytes(realm.realm_id, ours_v1, delegate=settings.delegate, account_type=TOKEN_OWNER_RECORD_V1))
    ledger.add_record(program, token_owner_record_bytes(realm.realm_id, Pubkey.new_unique(), delegate=Pubkey.new_unique()))
    ledger.add_record(program, token_owner_record_bytes(realm.realm_id, Pubkey.new_unique(), delegate=None))
    ledger.add_record(program, token_owner_record_bytes(Pubkey.new_unique(), Pubkey.new_unique(), delegate=settings.delegate))

    records = await DelegatorScanner(ledger, settings).scan(realm)

    assert {r.governing_token_owner for r in records} == {ours_v1, ours_v2}
    assert all(r.governance_delegate == settings.delegate for r in records)
    assert all(r.realm == realm.realm_id for r in records)


@pytest.mark.asyncio
async def test_one_query_per_record_type(ledger, settings, realm):

    await DelegatorScanner(ledger, settings).scan(realm)

    assert len(ledger.scan_calls) == 2

    for (program, filters), account_type in zip(ledger.scan_calls, (TOKEN_OWNER_RECORD_V1, TOKEN_OWNER_RECORD_V2)):
        assert program == str(realm.governance_program)
        assert filters[0].offset == 0 and filters[0].bytes == bytes([account_type])
        assert [f.offset for f in filters[1:]] == [1, 121, 122]


@pytest.mark.asyncio
async def test_empty_realm(ledger, settings, realm):
    assert await DelegatorScanner(ledger, settings).scan(realm) == []


@pytest.mark.asyncio
async def test_transport_failure_is_a_retrieval_error(ledger, settings, realm):

    ledger.fail_scans.add(str(realm.governance_program))

    with pytest.raises(RetrievalError):
        await DelegatorScanner(ledger, settings).scan(realm)


@pytest.mark.asyncio
async def test_malformed_realm_never_scans_unfiltered(ledger, settings, realm):

    broken = dataclasses.replace(realm, realm_id='definitely not a key')

    with pytest.raises(ConfigurationError):
        await DelegatorScanner(ledger, settings).scan(broken)

    assert ledger.scan_calls == []

