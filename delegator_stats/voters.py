from .addresses import derive_voter
from .layouts import decode_voter
from .logsetup import get_logger

logr = get_logger(__name__)


class VoterAccountSource:

    def __init__(self, client, settings):
        self.client = client
        self.settings = settings

    def voter_address(self, registrar, wallet):
        voter, _ = derive_voter(registrar, wallet, self.settings.vsr_program)
        return voter

    async def fetch_voter(self, registrar, wallet):
        """
        The wallet's VSR voter account, or None when it does not exist.

        Transport and decode errors are raised; the simulator folds them into
        a zero voting power along with the missing-account case.
        """

        address = self.voter_address(registrar, wallet)

        data = await self.client.get_account_info(address)

        if data is None:
            logr.debug(f"No voter account {address} for wallet {wallet}")
            return None

        return decode_voter(address, data)
