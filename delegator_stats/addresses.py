from solders.pubkey import Pubkey

from .errors import AddressDerivationExhausted
from .signatures import REGISTRAR_SEED, VOTER_SEED
from .utils import as_pubkey


def find_program_address(seeds, program_id):
    """
    Canonical program derived address for ``seeds`` under ``program_id``, with its bump.

    solders panics when no bump yields an off-curve address (or the seeds are
    too long to hash); that surfaces here as AddressDerivationExhausted.
    """
    try:
        return Pubkey.find_program_address(seeds, program_id)
    except BaseException as e:
        if type(e).__name__ != 'PanicException':
            raise
        raise AddressDerivationExhausted(f"No viable bump for seeds under {program_id}: {e}") from e


def derive_registrar(realm_id, mint, program_id):
    realm_id = as_pubkey(realm_id, 'realm id')
    mint = as_pubkey(mint, 'governance token mint')
    program_id = as_pubkey(program_id, 'program id')
    return find_program_address([bytes(realm_id), REGISTRAR_SEED, bytes(mint)], program_id)


def derive_voter(registrar, wallet, program_id):
    registrar = as_pubkey(registrar, 'registrar')
    wallet = as_pubkey(wallet, 'wallet')
    program_id = as_pubkey(program_id, 'program id')
    return find_program_address([bytes(registrar), VOTER_SEED, bytes(wallet)], program_id)
