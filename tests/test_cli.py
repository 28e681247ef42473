import httpx
from solders.pubkey import Pubkey

import pytest

from delegator_stats.addresses import derive_registrar, derive_voter
from delegator_stats.cli import derive, github_publisher, publish_all
from delegator_stats.errors import ConfigurationError
from delegator_stats.publishers import FilePublisher, GitHubContentsPublisher, GITHUB_API


def test_derive_prints_addresses(capsys, monkeypatch, realm, settings):

    monkeypatch.delenv('DELEGATOR_STATS_CONFIG_FILE', raising=False)

    wallet = Pubkey.new_unique()

    derive(str(wallet), 'solblaze')

    registrar, _ = derive_registrar(realm.realm_id, realm.governance_token, settings.vsr_program)
    voter, _ = derive_voter(registrar, wallet, settings.vsr_program)

    out = capsys.readouterr().out
    assert f"registrar={registrar}" in out
    assert f"voter={voter}" in out


def test_derive_unknown_realm(monkeypatch):

    monkeypatch.delenv('DELEGATOR_STATS_CONFIG_FILE', raising=False)

    with pytest.raises(ConfigurationError):
        derive(str(Pubkey.new_unique()), 'nowhere')


def test_github_publisher_from_environment(monkeypatch):

    monkeypatch.setenv('DELEGATOR_STATS_GITHUB_REPO', 'someone/stats')
    monkeypatch.setenv('G_TOKEN', 'xyz')

    publisher = github_publisher(strict=True)

    assert (publisher.owner, publisher.repo, publisher.path, publisher.token) == ('someone', 'stats', 'stats.json', 'xyz')
    assert publisher.strict


def test_github_repo_must_have_owner(monkeypatch):

    monkeypatch.setenv('DELEGATOR_STATS_GITHUB_REPO', 'stats')

    with pytest.raises(ConfigurationError):
        github_publisher(strict=False)


@pytest.mark.asyncio
async def test_strict_publish_failure_still_closes_github_client(tmp_path):

    def handler(request):
        return httpx.Response(500, json={'message': 'boom'})

    http = httpx.AsyncClient(base_url=GITHUB_API, transport=httpx.MockTransport(handler))
    publishers = [
        FilePublisher(tmp_path / 'stats.json'),
        GitHubContentsPublisher('VotaFi', 'delegators-stats', 'stats.json', token='t0k3n', http=http, strict=True),
    ]

    with pytest.raises(RuntimeError):
        await publish_all(publishers, {}, 1)

    assert (tmp_path / 'stats.json').exists()
    assert http.is_closed
