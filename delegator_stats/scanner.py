from .errors import RetrievalError, RpcError
from .filters import build_delegate_filters, account_type_filter
from .layouts import decode_token_owner_record, LayoutError
from .logsetup import get_logger
from .signatures import TOKEN_OWNER_RECORD_TYPES

logr = get_logger(__name__)


class DelegatorScanner:
    """Finds the token owner records in a realm that delegate to one address."""

    def __init__(self, client, settings, account_types=TOKEN_OWNER_RECORD_TYPES):
        self.client = client
        self.settings = settings
        self.account_types = account_types

    async def scan(self, realm):

        # ConfigurationError escapes from here, before anything hits the wire.
        filters = build_delegate_filters(realm.realm_id, self.settings.delegate)

        records = []

        for account_type in self.account_types:

            try:
                accounts = await self.client.get_program_accounts(realm.governance_program,
                                                                  [account_type_filter(account_type)] + filters)
            except RpcError as e:
                raise RetrievalError(f"Scanning {realm.slug} for delegators failed: {e}") from e

            for pubkey, data in accounts:
                try:
                    records.append(decode_token_owner_record(pubkey, data))
                except LayoutError as e:
                    logr.warning(f"{realm.slug}: skipping undecodable record {pubkey}: {e}")

        logr.info(f"{realm.slug}: found {len(records)} delegator record(s) for {self.settings.delegate}")

        return records
