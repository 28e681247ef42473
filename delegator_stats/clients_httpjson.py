from base64 import b64decode, b64encode
from itertools import count

import httpx
from solders.hash import Hash
from solders.pubkey import Pubkey

from .data_models import SimulatedExecution
from .errors import RpcError
from .logsetup import get_logger
from .utils import secret_text

logr = get_logger(__name__)


def decode_account_data(data):
    # [payload, encoding]
    payload, encoding = data
    if encoding != 'base64':
        raise RpcError('decode', f"unexpected account encoding {encoding}")
    return b64decode(payload)


class SolanaRpcHttpClient:
    """
    JSON-RPC over HTTP to a Solana node.

    Only the four calls the pipeline needs, no retries.  Safe to share between
    tasks; httpx pools the connections.
    """

    def __init__(self, url, http=None, commitment='confirmed', timeout=30.0):
        self.url = url
        self.commitment = commitment
        self.http = http or httpx.AsyncClient(timeout=timeout)
        self.ids = count(1)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def close(self):
        await self.http.aclose()

    async def call(self, method, *params):

        payload = {'jsonrpc': '2.0', 'id': next(self.ids), 'method': method, 'params': list(params)}

        try:
            resp = await self.http.post(self.url, json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as e:
            logr.error(f"{method} against {secret_text(self.url, 12)} failed: {e}")
            raise RpcError(method, str(e)) from e
        except ValueError as e:
            raise RpcError(method, f"response was not JSON: {e}") from e

        if 'error' in body:
            error = body['error']
            raise RpcError(method, error.get('message', 'Unknown error'), error.get('code'))

        return body['result']

    async def is_valid(self):

        if self.url in ('', 'ignored', None):
            ans = False
        else:
            try:
                ans = (await self.call('getHealth')) == 'ok'
            except RpcError:
                ans = False

        if ans:
            logr.info(f"The server '{secret_text(self.url, 12)}' is valid.")
        else:
            logr.info(f"The server '{secret_text(self.url, 12)}' is not valid.")

        return ans

    async def get_latest_blockhash(self):
        result = await self.call('getLatestBlockhash', {'commitment': self.commitment})
        return Hash.from_string(result['value']['blockhash'])

    async def get_account_info(self, address):
        result = await self.call('getAccountInfo', str(address), {'encoding': 'base64', 'commitment': self.commitment})

        value = result['value']
        if value is None:
            return None

        return decode_account_data(value['data'])

    async def get_program_accounts(self, program_id, filters):

        config = {
            'encoding': 'base64',
            'commitment': self.commitment,
            'filters': [f.to_rpc() for f in filters],
        }

        result = await self.call('getProgramAccounts', str(program_id), config)

        # Some nodes wrap the list in a context when asked to.
        if isinstance(result, dict):
            result = result['value']

        return [(Pubkey.from_string(item['pubkey']), decode_account_data(item['account']['data'])) for item in result]

    async def simulate_transaction(self, tx):

        config = {
            'encoding': 'base64',
            'sigVerify': False,
            'commitment': self.commitment,
        }

        result = await self.call('simulateTransaction', b64encode(bytes(tx)).decode(), config)

        value = result['value']

        return SimulatedExecution(err=value.get('err'), logs=value.get('logs'), units_consumed=value.get('unitsConsumed'))
