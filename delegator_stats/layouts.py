"""
Fixed binary layouts read by the pipeline.

spl-governance accounts and voter-stake-registry accounts/events are borsh
encoded.  The VSR ``Voter`` account is zero-copy (``repr(C)``) but every field
is naturally aligned, so the borsh view of it is byte-for-byte identical.
"""
from borsh_construct import CStruct, U8, U32, U64, I64, Bool, Option
from construct import Bytes, ConstructError
from solders.pubkey import Pubkey

from .data_models import GovernanceAccountRecord, VoterAccount, DepositEntry, \
    VoterInfoEvent, DepositEntryInfoEvent
from .signatures import account_discriminator, VOTER_ACCOUNT

PUBKEY = Bytes(32)

DEPOSIT_ENTRIES_PER_VOTER = 32

TOKEN_OWNER_RECORD = CStruct(
    "account_type" / U8,
    "realm" / PUBKEY,
    "governing_token_mint" / PUBKEY,
    "governing_token_owner" / PUBKEY,
    "governing_token_deposit_amount" / U64,
    "unrelinquished_votes_count" / U32,
    "total_votes_count" / U32,
    "outstanding_proposal_count" / U8,
    "version" / U8,
    "reserved" / Bytes(6),
    "governance_delegate" / Option(PUBKEY),
)

LOCKUP = CStruct(
    "start_ts" / I64,
    "end_ts" / I64,
    "kind" / U8,
    "reserved" / Bytes(15),
)

DEPOSIT_ENTRY = CStruct(
    "lockup" / LOCKUP,
    "amount_deposited_native" / U64,
    "amount_initially_locked_native" / U64,
    "is_used" / Bool,
    "allow_clawback" / Bool,
    "voting_mint_config_idx" / U8,
    "reserved" / Bytes(29),
)

VOTER = CStruct(
    "discriminator" / Bytes(8),
    "voter_authority" / PUBKEY,
    "registrar" / PUBKEY,
    "deposits" / DEPOSIT_ENTRY[DEPOSIT_ENTRIES_PER_VOTER],
    "voter_bump" / U8,
    "voter_weight_record_bump" / U8,
    "reserved" / Bytes(94),
)

VOTER_INFO_EVENT = CStruct(
    "voting_power" / U64,
    "voting_power_baseline" / U64,
)

VESTING_INFO = CStruct(
    "rate" / U64,
    "next_timestamp" / U64,
)

LOCKING_INFO = CStruct(
    "amount" / U64,
    "end_timestamp" / Option(U64),
    "vesting" / Option(VESTING_INFO),
)

DEPOSIT_ENTRY_INFO_EVENT = CStruct(
    "deposit_entry_index" / U8,
    "voting_mint_config_index" / U8,
    "unlocked" / U64,
    "voting_power" / U64,
    "voting_power_baseline" / U64,
    "locking" / Option(LOCKING_INFO),
)


class LayoutError(ValueError):
    pass


def _plain(obj):
    if isinstance(obj, dict):
        return {k: _plain(v) for k, v in obj.items() if not k.startswith('_')}
    return obj


def decode_token_owner_record(pubkey, data):

    try:
        raw = TOKEN_OWNER_RECORD.parse(data)
    except ConstructError as e:
        raise LayoutError(f"Could not decode token owner record {pubkey}: {e}") from e

    delegate = raw.governance_delegate

    return GovernanceAccountRecord(
        pubkey=pubkey,
        account_type=raw.account_type,
        realm=Pubkey(raw.realm),
        governing_token_mint=Pubkey(raw.governing_token_mint),
        governing_token_owner=Pubkey(raw.governing_token_owner),
        governing_token_deposit_amount=raw.governing_token_deposit_amount,
        unrelinquished_votes_count=raw.unrelinquished_votes_count,
        total_votes_count=raw.total_votes_count,
        outstanding_proposal_count=raw.outstanding_proposal_count,
        version=raw.version,
        governance_delegate=Pubkey(delegate) if delegate is not None else None,
    )


def decode_voter(address, data):

    expected = account_discriminator(VOTER_ACCOUNT)
    if data[:8] != expected:
        raise LayoutError(f"Account {address} is not a VSR voter (discriminator {data[:8].hex()} != {expected.hex()})")

    try:
        raw = VOTER.parse(data)
    except ConstructError as e:
        raise LayoutError(f"Could not decode voter {address}: {e}") from e

    deposits = [
        DepositEntry(
            index=i,
            is_used=d.is_used,
            amount_deposited_native=d.amount_deposited_native,
            amount_initially_locked_native=d.amount_initially_locked_native,
            allow_clawback=d.allow_clawback,
            voting_mint_config_idx=d.voting_mint_config_idx,
            lockup_kind=d.lockup.kind,
            lockup_start_ts=d.lockup.start_ts,
            lockup_end_ts=d.lockup.end_ts,
        )
        for i, d in enumerate(raw.deposits)
    ]

    return VoterAccount(
        address=address,
        registrar=Pubkey(raw.registrar),
        voter_authority=Pubkey(raw.voter_authority),
        deposits=deposits,
        voter_bump=raw.voter_bump,
        voter_weight_record_bump=raw.voter_weight_record_bump,
    )


def decode_voter_info(payload):
    raw = VOTER_INFO_EVENT.parse(payload)
    return VoterInfoEvent(voting_power=raw.voting_power, voting_power_baseline=raw.voting_power_baseline)


def decode_deposit_entry_info(payload):
    raw = DEPOSIT_ENTRY_INFO_EVENT.parse(payload)
    return DepositEntryInfoEvent(
        deposit_entry_index=raw.deposit_entry_index,
        voting_mint_config_index=raw.voting_mint_config_index,
        unlocked=raw.unlocked,
        voting_power=raw.voting_power,
        voting_power_baseline=raw.voting_power_baseline,
        locking=_plain(raw.locking) if raw.locking is not None else None,
    )
