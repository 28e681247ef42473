#!/usr/bin/env python3
from dotenv import load_dotenv

load_dotenv()

import os
import sys
import json
import time
import asyncio
from argh import arg, dispatch_commands

from .addresses import derive_registrar, derive_voter
from .aggregator import Aggregator, to_serializable
from .clients_httpjson import SolanaRpcHttpClient
from .config import load_config
from .errors import ConfigurationError
from .logsetup import get_logger
from .publishers import FilePublisher, GitHubContentsPublisher
from .utils import secret_text

glogr = get_logger('delegator_stats')


def rpc_url():
    url = os.environ.get('RPC_URL')
    if not url:
        raise ConfigurationError("The environment variable RPC_URL must be set.")
    glogr.info(f"RPC_URL={secret_text(url, 12)}")
    return url


def github_publisher(strict):

    repo = os.environ.get('DELEGATOR_STATS_GITHUB_REPO', 'VotaFi/delegators-stats')
    owner, _, name = repo.partition('/')
    if not name:
        raise ConfigurationError(f"DELEGATOR_STATS_GITHUB_REPO must look like owner/repo, got {repo!r}")

    return GitHubContentsPublisher(
        owner=owner,
        repo=name,
        path=os.environ.get('DELEGATOR_STATS_GITHUB_PATH', 'stats.json'),
        token=os.environ.get('G_TOKEN'),
        branch=os.environ.get('DELEGATOR_STATS_GITHUB_BRANCH', 'main'),
        strict=strict,
    )


async def compute(config_file=None):

    settings, realms = load_config(config_file)

    async with SolanaRpcHttpClient(rpc_url()) as client:
        aggregator = Aggregator(client, settings)
        summaries, failures = await aggregator.run_with_failures(realms)

    return to_serializable(summaries), failures


async def publish_all(publishers, data, timestamp):

    try:
        for publisher in publishers:
            await publisher.publish(data, timestamp)
    finally:
        for publisher in publishers:
            if isinstance(publisher, GitHubContentsPublisher):
                await publisher.close()


@arg('--config-file', help='YAML file with the delegate and realm list.')
@arg('--output', help='Also write the stats JSON to this path.')
@arg('--publish', help='Push the stats JSON to the GitHub stats repo.')
@arg('--strict', help='Fail instead of warning when publishing fails.')
def run(config_file=None, output=None, publish=False, strict=False):
    """Compute delegated voting power for every configured realm."""

    async def main():

        data, failures = await compute(config_file)

        print(json.dumps(data, indent=2))

        timestamp = int(time.time() * 1000)

        publishers = []
        if output:
            publishers.append(FilePublisher(output))
        if publish:
            publishers.append(github_publisher(strict))

        await publish_all(publishers, data, timestamp)

        return failures

    failures = asyncio.run(main())

    if failures and strict:
        glogr.error(f"{len(failures)} realm(s) failed: {', '.join(sorted(failures))}")
        sys.exit(1)


@arg('wallet', help='Wallet (governing token owner) address.')
@arg('realm_slug', help='Slug of a configured realm.')
def derive(wallet, realm_slug, config_file=None):
    """Print the VSR registrar and voter addresses for a wallet."""

    settings, realms = load_config(config_file)

    realm = {r.slug: r for r in realms}.get(realm_slug)
    if realm is None:
        raise ConfigurationError(f"Unknown realm {realm_slug}, configured: {', '.join(r.slug for r in realms)}")

    registrar, registrar_bump = derive_registrar(realm.realm_id, realm.governance_token, settings.vsr_program)
    voter, voter_bump = derive_voter(registrar, wallet, settings.vsr_program)

    print(f"registrar={registrar} bump={registrar_bump}")
    print(f"voter={voter} bump={voter_bump}")


def check_rpc():
    """Ask the node in RPC_URL whether it is healthy."""

    async def main():
        async with SolanaRpcHttpClient(rpc_url()) as client:
            return await client.is_valid()

    if not asyncio.run(main()):
        sys.exit(1)


def main():
    dispatch_commands([run, derive, check_rpc])


if __name__ == '__main__':
    main()
