import re
from base64 import b64decode
from binascii import Error as Base64Error

from construct import ConstructError

from .errors import SimulationError
from .layouts import decode_voter_info, decode_deposit_entry_info
from .logsetup import get_logger
from .signatures import event_discriminator, VOTER_INFO, DEPOSIT_ENTRY_INFO
from .utils import as_pubkey

logr = get_logger(__name__)

PROGRAM_DATA = 'Program data: '
INVOKE = re.compile(r"^Program (\w+) invoke \[\d+\]")
COMPLETE = re.compile(r"^Program (\w+) (success|failed)")


class VsrEventCaster:
    """
    Turns the log of a simulated voter-stake-registry call into events.

    Anchor emits each event as ``Program data: base64(discriminator + borsh)``.
    Only data logged while the VSR program is the innermost frame is decoded.
    """

    decoders = {
        VOTER_INFO: decode_voter_info,
        DEPOSIT_ENTRY_INFO: decode_deposit_entry_info,
    }

    def __init__(self, program_id):
        self.program_id = str(as_pubkey(program_id, 'program id'))
        self.by_discriminator = {event_discriminator(name): (name, fn) for name, fn in self.decoders.items()}

    def lookup(self, discriminator):
        return self.by_discriminator.get(discriminator, (None, None))

    def decode(self, field):

        try:
            raw = b64decode(field, validate=True)
        except (Base64Error, ValueError) as e:
            raise SimulationError(f"Bad base64 in program data: {e}") from e

        name, caster_fn = self.lookup(raw[:8])

        if caster_fn is None:
            logr.debug(f"Skipping unknown event with discriminator {raw[:8].hex()}")
            return None

        try:
            return caster_fn(raw[8:])
        except ConstructError as e:
            raise SimulationError(f"Could not decode {name} event: {e}") from e

    def parse_logs(self, logs):

        stack = []

        for line in logs:

            if line.startswith(PROGRAM_DATA):

                if stack and stack[-1] == self.program_id:
                    for field in line[len(PROGRAM_DATA):].split():
                        event = self.decode(field)
                        if event is not None:
                            yield event
                continue

            m = INVOKE.match(line)
            if m:
                stack.append(m.group(1))
                continue

            m = COMPLETE.match(line)
            if m and stack:
                stack.pop()
