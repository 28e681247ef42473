from base64 import b64encode

from solders.hash import Hash
from solders.pubkey import Pubkey

from delegator_stats.addresses import derive_registrar, derive_voter
from delegator_stats.data_models import SimulatedExecution
from delegator_stats.errors import RpcError
from delegator_stats.layouts import TOKEN_OWNER_RECORD, VOTER, VOTER_INFO_EVENT, DEPOSIT_ENTRY_INFO_EVENT
from delegator_stats.signatures import account_discriminator, event_discriminator, VOTER_ACCOUNT, \
    VOTER_INFO, DEPOSIT_ENTRY_INFO, COMPUTE_BUDGET_PROGRAM, TOKEN_OWNER_RECORD_V2

####################################
#
#  Byte builders for accounts and logs, so tests speak the real wire layouts.
#

def token_owner_record_bytes(realm_id, owner, delegate=None, account_type=TOKEN_OWNER_RECORD_V2, mint=None, amount=0):
    return TOKEN_OWNER_RECORD.build({
        'account_type': account_type,
        'realm': bytes(realm_id),
        'governing_token_mint': bytes(mint or Pubkey.default()),
        'governing_token_owner': bytes(owner),
        'governing_token_deposit_amount': amount,
        'unrelinquished_votes_count': 0,
        'total_votes_count': 3,
        'outstanding_proposal_count': 0,
        'version': 1,
        'reserved': bytes(6),
        'governance_delegate': bytes(delegate) if delegate is not None else None,
    })


def deposit(used, amount=1_000_000_000):
    return {
        'lockup': {'start_ts': 0, 'end_ts': 0, 'kind': 0, 'reserved': bytes(15)},
        'amount_deposited_native': amount if used else 0,
        'amount_initially_locked_native': 0,
        'is_used': used,
        'allow_clawback': False,
        'voting_mint_config_idx': 0,
        'reserved': bytes(29),
    }


def voter_bytes(registrar, authority, used):
    return VOTER.build({
        'discriminator': account_discriminator(VOTER_ACCOUNT),
        'voter_authority': bytes(authority),
        'registrar': bytes(registrar),
        'deposits': [deposit(i < used) for i in range(32)],
        'voter_bump': 255,
        'voter_weight_record_bump': 254,
        'reserved': bytes(94),
    })


def voter_info_data(voting_power, baseline=0):
    payload = event_discriminator(VOTER_INFO) + VOTER_INFO_EVENT.build({'voting_power': voting_power, 'voting_power_baseline': baseline})
    return 'Program data: ' + b64encode(payload).decode()


def deposit_entry_info_data(index, voting_power, locking=None):
    payload = event_discriminator(DEPOSIT_ENTRY_INFO) + DEPOSIT_ENTRY_INFO_EVENT.build({
        'deposit_entry_index': index,
        'voting_mint_config_index': 0,
        'unlocked': 0,
        'voting_power': voting_power,
        'voting_power_baseline': voting_power,
        'locking': locking,
    })
    return 'Program data: ' + b64encode(payload).decode()


def simulation_logs(program_id, *data_lines):
    return [
        f'Program {COMPUTE_BUDGET_PROGRAM} invoke [1]',
        f'Program {COMPUTE_BUDGET_PROGRAM} success',
        f'Program {program_id} invoke [1]',
        'Program log: Instruction: LogVoterInfo',
        *data_lines,
        f'Program {program_id} consumed 41234 of 999850 compute units',
        f'Program {program_id} success',
    ]


class FakeLedger:
    """In-memory stand-in for SolanaRpcHttpClient, memcmp filters included."""

    def __init__(self):
        self.accounts = {}
        self.program_accounts = {}
        self.simulations = {}
        self.simulate_calls = []
        self.blockhash_calls = 0
        self.scan_calls = []
        self.fail_scans = set()

    def add_record(self, program_id, data, pubkey=None):
        pubkey = pubkey or Pubkey.new_unique()
        self.program_accounts.setdefault(str(program_id), []).append((pubkey, data))
        return pubkey

    def add_voter(self, realm, settings, wallet, used, simulate=None):
        registrar, _ = derive_registrar(realm.realm_id, realm.governance_token, settings.vsr_program)
        voter, _ = derive_voter(registrar, wallet, settings.vsr_program)
        self.accounts[str(voter)] = voter_bytes(registrar, wallet, used)
        if simulate is not None:
            self.simulations[str(voter)] = simulate
        return voter

    async def get_latest_blockhash(self):
        self.blockhash_calls += 1
        return Hash.default()

    async def get_account_info(self, address):
        return self.accounts.get(str(address))

    async def get_program_accounts(self, program_id, filters):
        self.scan_calls.append((str(program_id), list(filters)))

        if str(program_id) in self.fail_scans:
            raise RpcError('getProgramAccounts', 'node is behind')

        def matches(data):
            return all(data[f.offset:f.offset + len(f.bytes)] == f.bytes for f in filters)

        return [(pk, data) for pk, data in self.program_accounts.get(str(program_id), []) if matches(data)]

    async def simulate_transaction(self, tx):
        keys = [str(k) for k in tx.message.account_keys]
        data = bytes(tx.message.instructions[-1].data)
        begin, count = data[8], data[9]

        voter = next((k for k in keys if k in self.simulations), None)
        if voter is None:
            raise RpcError("simulateTransaction", "AccountNotFound")
        self.simulate_calls.append((voter, begin, count))

        logs = self.simulations[voter](begin, count)
        return SimulatedExecution(err=None, logs=logs, units_consumed=41234)
