from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from solders.pubkey import Pubkey

from .errors import ConfigurationError
from .signatures import GOVERNANCE_PROGRAM, VSR_PROGRAM, VOTA_REALMS_DELEGATE, SIMULATION_WALLET, \
    MAX_DEPOSITS_PER_SIMULATION, SIMULATION_COMPUTE_UNITS
from .utils import as_pubkey

ZERO = Decimal(0)


@dataclass(frozen=True)
class RealmConfig:
    slug: str
    name: str
    governance_program: Pubkey
    governance_token: Pubkey
    governance_token_decimals: int
    realm_id: Pubkey
    governance_token_name: Optional[str] = None

    @classmethod
    def from_dict(cls, d, default_governance_program=GOVERNANCE_PROGRAM):
        slug = d['slug']

        decimals = d['governance_token_decimals']
        if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
            raise ConfigurationError(f"{slug}.governance_token_decimals must be a non-negative integer, got {decimals!r}")

        return cls(
            slug=slug,
            name=d.get('name', slug),
            governance_program=as_pubkey(d.get('governance_program', default_governance_program), f"{slug}.governance_program"),
            governance_token=as_pubkey(d['governance_token'], f"{slug}.governance_token"),
            governance_token_decimals=decimals,
            realm_id=as_pubkey(d['realm_id'], f"{slug}.realm_id"),
            governance_token_name=d.get('governance_token_name'),
        )


@dataclass(frozen=True)
class DelegationSettings:
    """Everything the pipeline needs besides the realm itself."""

    delegate: Pubkey = field(default_factory=lambda: Pubkey.from_string(VOTA_REALMS_DELEGATE))
    vsr_program: Pubkey = field(default_factory=lambda: Pubkey.from_string(VSR_PROGRAM))
    simulation_wallet: Pubkey = field(default_factory=lambda: Pubkey.from_string(SIMULATION_WALLET))
    compute_unit_limit: int = SIMULATION_COMPUTE_UNITS
    deposit_batch_size: int = MAX_DEPOSITS_PER_SIMULATION
    max_concurrency: int = 16
    failure_policy: str = 'zero'


@dataclass(frozen=True)
class GovernanceAccountRecord:
    pubkey: Pubkey
    account_type: int
    realm: Pubkey
    governing_token_mint: Pubkey
    governing_token_owner: Pubkey
    governing_token_deposit_amount: int
    unrelinquished_votes_count: int
    total_votes_count: int
    outstanding_proposal_count: int
    version: int
    governance_delegate: Optional[Pubkey] = None


@dataclass(frozen=True)
class DepositEntry:
    index: int
    is_used: bool
    amount_deposited_native: int
    amount_initially_locked_native: int
    allow_clawback: bool
    voting_mint_config_idx: int
    lockup_kind: int
    lockup_start_ts: int
    lockup_end_ts: int


@dataclass(frozen=True)
class VoterAccount:
    address: Pubkey
    registrar: Pubkey
    voter_authority: Pubkey
    deposits: List[DepositEntry]
    voter_bump: int
    voter_weight_record_bump: int

    @property
    def used_deposits(self):
        return [d for d in self.deposits if d.is_used]


@dataclass(frozen=True)
class DepositBatch:
    begin: int
    count: int

    @property
    def end(self):
        return self.begin + self.count


@dataclass(frozen=True)
class VoterInfoEvent:
    voting_power: int
    voting_power_baseline: int
    name: str = 'VoterInfo'


@dataclass(frozen=True)
class DepositEntryInfoEvent:
    deposit_entry_index: int
    voting_mint_config_index: int
    unlocked: int
    voting_power: int
    voting_power_baseline: int
    locking: Optional[dict] = None
    name: str = 'DepositEntryInfo'


@dataclass(frozen=True)
class SimulatedExecution:
    err: Optional[object]
    logs: Optional[List[str]]
    units_consumed: Optional[int] = None


@dataclass(frozen=True)
class VotingPowerResult:
    wallet: Pubkey
    voting_power: Decimal = ZERO
    failure: Optional[str] = None

    @property
    def ok(self):
        return self.failure is None


@dataclass(frozen=True)
class DelegatorVotingPower:
    pubkey: Pubkey
    voting_power: Decimal
    wallet: Optional[Pubkey] = None

    def to_dict(self):
        return {'pubkey': str(self.pubkey), 'votingPower': float(self.voting_power)}


@dataclass(frozen=True)
class RealmSummary:
    realm: str
    delegators: List[DelegatorVotingPower]

    @property
    def total_voting_power(self):
        return sum((d.voting_power for d in self.delegators), ZERO)

    def to_dict(self):
        return {
            'realm': self.realm,
            'delegators': [d.to_dict() for d in self.delegators],
            'totalVotingPower': float(self.total_voting_power),
        }
