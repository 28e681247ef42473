from decimal import Decimal
from math import ceil

from solders.compute_budget import set_compute_unit_limit
from solders.instruction import Instruction, AccountMeta
from solders.message import MessageV0
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from .addresses import derive_registrar
from .data_models import DepositBatch, VotingPowerResult, ZERO
from .errors import AddressDerivationExhausted, SimulationError
from .events import VsrEventCaster
from .logsetup import get_logger
from .signatures import instruction_selector, LOG_VOTER_INFO, VOTER_INFO, MAX_DEPOSITS_PER_SIMULATION
from .voters import VoterAccountSource

logr = get_logger(__name__)


def partition_deposits(n, batch_size=MAX_DEPOSITS_PER_SIMULATION):
    """Split deposit indices [0, n) into contiguous batches of at most ``batch_size``."""

    if not 0 < batch_size <= MAX_DEPOSITS_PER_SIMULATION:
        raise ValueError(f"batch_size must be in 1..{MAX_DEPOSITS_PER_SIMULATION}, got {batch_size}")

    return [DepositBatch(begin=i * batch_size, count=min(batch_size, n - i * batch_size))
            for i in range(ceil(n / batch_size))]


def scale_voting_power(raw, decimals):
    return Decimal(int(raw)).scaleb(-int(decimals))


def first_voter_info(events):
    for event in events:
        if event.name == VOTER_INFO:
            return event
    return None


class VotingPowerSimulator:
    """
    Voting power is never stored in an account.  The VSR program computes it
    inside ``log_voter_info`` and emits it as an event, so we simulate that
    instruction (never submitting it) and read the event back from the logs.
    """

    def __init__(self, client, settings, voters=None):
        self.client = client
        self.settings = settings
        self.voters = voters or VoterAccountSource(client, settings)
        self.caster = VsrEventCaster(settings.vsr_program)

    def build_log_voter_info_tx(self, registrar, voter, batch, blockhash):

        data = instruction_selector(LOG_VOTER_INFO) + bytes([batch.begin, batch.count])

        ix = Instruction(self.settings.vsr_program, data, [AccountMeta(registrar, False, False),
                                                           AccountMeta(voter, False, False)])

        # The payer never signs for real; simulation runs with sigVerify off.
        message = MessageV0.try_compile(
            self.settings.simulation_wallet,
            [set_compute_unit_limit(self.settings.compute_unit_limit), ix],
            [],
            blockhash,
        )

        return VersionedTransaction.populate(message, [Signature.default()])

    async def simulate_batches(self, registrar, voter, batches):

        if not batches:
            return []

        blockhash = await self.client.get_latest_blockhash()

        events = []

        # One at a time, to keep the load on the node bounded.
        for batch in batches:
            tx = self.build_log_voter_info_tx(registrar, voter, batch, blockhash)

            result = await self.client.simulate_transaction(tx)

            if result.logs is None:
                raise SimulationError(f"Simulation of deposits [{batch.begin}, {batch.end}) returned no logs (err={result.err})")

            if result.err:
                logr.warning(f"Simulation of deposits [{batch.begin}, {batch.end}) for voter {voter} errored: {result.err}")

            events.extend(self.caster.parse_logs(result.logs))

        return events

    async def simulate(self, wallet, realm):

        registrar, _ = derive_registrar(realm.realm_id, realm.governance_token, self.settings.vsr_program)

        voter = await self.voters.fetch_voter(registrar, wallet)

        if voter is None:
            raise SimulationError(f"No voter account for {wallet} in {realm.slug}")

        batches = partition_deposits(len(voter.used_deposits), self.settings.deposit_batch_size)

        if not batches:
            return ZERO

        events = await self.simulate_batches(registrar, voter.address, batches)

        info = first_voter_info(events)

        if info is None:
            raise SimulationError(f"No {VOTER_INFO} event in {len(batches)} simulation(s) for {wallet}")

        return scale_voting_power(info.voting_power, realm.governance_token_decimals)

    async def evaluate(self, wallet, realm):

        try:
            voting_power = await self.simulate(wallet, realm)
        except AddressDerivationExhausted:
            raise
        except Exception as e:
            logr.warning(f"{realm.slug}: voting power of {wallet} unavailable: {type(e).__name__}: {e}")
            return VotingPowerResult(wallet=wallet, failure=f"{type(e).__name__}: {e}")

        return VotingPowerResult(wallet=wallet, voting_power=voting_power)

    async def compute_voting_power(self, wallet, realm):
        return (await self.evaluate(wallet, realm)).voting_power
