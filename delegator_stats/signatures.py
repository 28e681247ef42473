from hashlib import sha256

GOVERNANCE_PROGRAM = 'GovER5Lthms3bLBqWub97yVrMmEogzX7xNjdXpPPCVZw'
VSR_PROGRAM = 'vsr2nfGVNHmSY8uxoBGqq8AQbwz3JwaEaHqGbsTPXqQ'
COMPUTE_BUDGET_PROGRAM = 'ComputeBudget111111111111111111111111111111'

VOTA_REALMS_DELEGATE = 'AMd2nnFYtPGkeEbUvyVtWRDkG3nrESCvNW4C43mEvWrF'
SIMULATION_WALLET = 'ENmcpFCpxN1CqyUjuog9yyUVfdXBKF3LVCwLr7grJZpk'

REGISTRAR_SEED = b'registrar'
VOTER_SEED = b'voter'

# Simulating log_voter_info is capped by the compute budget, cost scales with deposits.
MAX_DEPOSITS_PER_SIMULATION = 8
SIMULATION_COMPUTE_UNITS = 1_000_000

# spl-governance account types
TOKEN_OWNER_RECORD_V1 = 2
TOKEN_OWNER_RECORD_V2 = 17
TOKEN_OWNER_RECORD_TYPES = (TOKEN_OWNER_RECORD_V1, TOKEN_OWNER_RECORD_V2)

# TokenOwnerRecord: version, realm, mint, owner, deposit amount, two counters,
# two flags, reserved, then Option<Pubkey> governance_delegate.
REALM_OFFSET = 1
HAS_DELEGATE_OFFSET = 1 + 32 + 32 + 32 + 8 + 4 + 4 + 1 + 1 + 6
DELEGATE_OFFSET = HAS_DELEGATE_OFFSET + 1

VOTER_INFO = 'VoterInfo'
DEPOSIT_ENTRY_INFO = 'DepositEntryInfo'
LOG_VOTER_INFO = 'log_voter_info'
VOTER_ACCOUNT = 'Voter'

def anchor_discriminator(namespace, name):
    return sha256(f"{namespace}:{name}".encode()).digest()[:8]

def event_discriminator(name):
    return anchor_discriminator('event', name)

def account_discriminator(name):
    return anchor_discriminator('account', name)

def instruction_selector(name):
    return anchor_discriminator('global', name)


if __name__ == '__main__':

    for name in (VOTER_INFO, DEPOSIT_ENTRY_INFO):
        print(event_discriminator(name).hex(), " -> event", name)

    print(account_discriminator(VOTER_ACCOUNT).hex(), " -> account", VOTER_ACCOUNT)
    print(instruction_selector(LOG_VOTER_INFO).hex(), " -> ix", LOG_VOTER_INFO)
