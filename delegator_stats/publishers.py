import json
from base64 import b64encode
from pathlib import Path

import httpx

from .abcs import Publisher
from .logsetup import get_logger

logr = get_logger(__name__)

GITHUB_API = 'https://api.github.com'


def dumps(data, indent=None):
    return json.dumps(data, indent=indent)


class FilePublisher(Publisher):

    def __init__(self, path):
        self.path = Path(path)

    async def publish(self, data, timestamp):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(dumps(data, indent=2))
        logr.info(f"{self.name}: data for timestamp {timestamp} written to {self.path}")


class GitHubContentsPublisher(Publisher):
    """Creates or replaces one file in a GitHub repo through the contents API."""

    def __init__(self, owner, repo, path, token, branch='main', http=None, strict=False):
        self.owner = owner
        self.repo = repo
        self.path = path
        self.token = token
        self.branch = branch
        self.strict = strict
        self.http = http or httpx.AsyncClient(base_url=GITHUB_API, timeout=30.0)

    @property
    def url(self):
        return f"/repos/{self.owner}/{self.repo}/contents/{self.path}"

    @property
    def headers(self):
        headers = {'Accept': 'application/vnd.github+json'}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    async def current_sha(self):

        resp = await self.http.get(self.url, params={'ref': self.branch}, headers=self.headers)

        if resp.status_code == 404:
            return None

        resp.raise_for_status()
        return resp.json()['sha']

    async def publish(self, data, timestamp):

        content = b64encode(dumps(data).encode()).decode()

        try:
            body = {
                'message': f"Add data for timestamp {timestamp}",
                'content': content,
                'branch': self.branch,
            }

            sha = await self.current_sha()
            if sha:
                body['sha'] = sha

            resp = await self.http.put(self.url, json=body, headers=self.headers)
            resp.raise_for_status()

            logr.info(f"{self.name}: data for timestamp {timestamp} saved to {self.owner}/{self.repo}/{self.path}")

        except httpx.HTTPError as e:
            if self.strict:
                raise RuntimeError(f"Failed to save data to GitHub: {e}") from e
            else:
                logr.warning(f"{self.name}: failed to save data to GitHub: {e}")

    async def close(self):
        await self.http.aclose()
