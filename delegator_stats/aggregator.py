import asyncio

from .data_models import DelegatorVotingPower, RealmSummary
from .errors import AddressDerivationExhausted, ConfigurationError, SimulationError
from .logsetup import get_logger
from .scanner import DelegatorScanner
from .simulator import VotingPowerSimulator

logr = get_logger(__name__)

FAILURE_POLICIES = ('zero', 'propagate')


class Aggregator:
    """
    Scans every realm for delegators and sums their voting power.

    Realms run concurrently.  Inside a realm each delegator is its own task,
    but no more than ``settings.max_concurrency`` delegators are simulated at
    once across the whole run.
    """

    def __init__(self, client, settings, scanner=None, simulator=None):

        if settings.failure_policy not in FAILURE_POLICIES:
            raise ConfigurationError(f"failure_policy must be one of {FAILURE_POLICIES}, got {settings.failure_policy!r}")

        if settings.max_concurrency < 1:
            raise ConfigurationError(f"max_concurrency must be positive, got {settings.max_concurrency}")

        self.settings = settings
        self.scanner = scanner or DelegatorScanner(client, settings)
        self.simulator = simulator or VotingPowerSimulator(client, settings)

    def resolve(self, result, realm):

        if result.ok:
            return result.voting_power

        if self.settings.failure_policy == 'propagate':
            raise SimulationError(f"{realm.slug}: {result.wallet}: {result.failure}")

        return result.voting_power

    async def summarize(self, realm, slots):

        records = await self.scanner.scan(realm)

        async def one(record):
            async with slots:
                result = await self.simulator.evaluate(record.governing_token_owner, realm)
            return DelegatorVotingPower(pubkey=record.pubkey, voting_power=self.resolve(result, realm),
                                        wallet=record.governing_token_owner)

        # Every delegator task settles before the first failure is raised.
        outcomes = await asyncio.gather(*[one(record) for record in records], return_exceptions=True)

        errors = [o for o in outcomes if isinstance(o, BaseException)]
        if errors:
            fatal = [e for e in errors if isinstance(e, AddressDerivationExhausted) or not isinstance(e, Exception)]
            raise (fatal or errors)[0]

        summary = RealmSummary(realm=realm.slug, delegators=list(outcomes))

        logr.info(f"{realm.slug}: {len(summary.delegators)} delegator(s), total voting power {summary.total_voting_power}")

        return summary

    async def run_with_failures(self, realms):
        """Summaries for the realms that completed, and the error for each that did not."""

        slots = asyncio.Semaphore(self.settings.max_concurrency)

        outcomes = await asyncio.gather(*[self.summarize(realm, slots) for realm in realms], return_exceptions=True)

        summaries, failures = {}, {}

        for realm, outcome in zip(realms, outcomes):
            if isinstance(outcome, AddressDerivationExhausted):
                raise outcome
            elif isinstance(outcome, Exception):
                logr.error(f"{realm.slug}: no summary, {type(outcome).__name__}: {outcome}")
                failures[realm.slug] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                summaries[realm.slug] = outcome

        return summaries, failures

    async def run(self, realms):
        summaries, _ = await self.run_with_failures(realms)
        return summaries


def to_serializable(summaries):
    return {slug: summary.to_dict() for slug, summary in summaries.items()}
