from base64 import b64encode
from dataclasses import dataclass

from .errors import ConfigurationError
from .signatures import REALM_OFFSET, HAS_DELEGATE_OFFSET, DELEGATE_OFFSET
from .utils import as_pubkey


@dataclass(frozen=True)
class MemcmpFilter:
    offset: int
    bytes: bytes

    def to_rpc(self):
        return {'memcmp': {'offset': self.offset, 'bytes': b64encode(self.bytes).decode(), 'encoding': 'base64'}}


def pubkey_filter(offset, key, what='key'):
    return MemcmpFilter(offset, bytes(as_pubkey(key, what)))

def boolean_filter(offset, value):
    if not isinstance(value, bool):
        raise ConfigurationError(f"Boolean filter at offset {offset} needs a bool, got {value!r}")
    return MemcmpFilter(offset, b'\x01' if value else b'\x00')

def account_type_filter(account_type):
    if not 0 <= account_type <= 255:
        raise ConfigurationError(f"Account type {account_type} does not fit in a byte")
    return MemcmpFilter(0, bytes([account_type]))


def build_delegate_filters(realm_id, delegate):
    """
    The three predicates selecting token owner records of ``realm_id`` whose
    governance delegate is ``delegate``.

    Any malformed input raises ConfigurationError; an unfiltered scan is never
    an acceptable fallback.
    """

    return [
        pubkey_filter(REALM_OFFSET, realm_id, 'realm id'),
        boolean_filter(HAS_DELEGATE_OFFSET, True),
        pubkey_filter(DELEGATE_OFFSET, delegate, 'delegate address'),
    ]
