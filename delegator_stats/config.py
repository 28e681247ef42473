import os
from pathlib import Path

import yaml

from .data_models import RealmConfig, DelegationSettings
from .errors import ConfigurationError
from .logsetup import get_logger
from .signatures import GOVERNANCE_PROGRAM, VSR_PROGRAM, VOTA_REALMS_DELEGATE, SIMULATION_WALLET, \
    SIMULATION_COMPUTE_UNITS, MAX_DEPOSITS_PER_SIMULATION
from .utils import as_pubkey

logr = get_logger(__name__)

######################################################################
#
# Used when no YAML is given: the realms VotaFi is delegated in today.
#
######################################################################

DEFAULT_CONFIG = {
    'delegate': VOTA_REALMS_DELEGATE,
    'governance_program': GOVERNANCE_PROGRAM,
    'vsr_program': VSR_PROGRAM,
    'simulation_wallet': SIMULATION_WALLET,
    'compute_unit_limit': SIMULATION_COMPUTE_UNITS,
    'deposit_batch_size': MAX_DEPOSITS_PER_SIMULATION,
    'max_concurrency': 16,
    'failure_policy': 'zero',
    'realms': [
        {
            'slug': 'solblaze',
            'name': 'SolBlaze',
            'governance_program': GOVERNANCE_PROGRAM,
            'governance_token': 'BLZEEuZUBVqFhj8adcCFPJvPVCiCyVmh3hkJMrU8KuJA',
            'governance_token_name': 'BLZE',
            'governance_token_decimals': 9,
            'realm_id': '7vrFDrK9GRNX7YZXbo7N3kvta7Pbn6W1hCXQ6C7WBxG9',
        },
    ],
}


def read_config_file(path=None):

    path = path or os.getenv('DELEGATOR_STATS_CONFIG_FILE')

    if not path:
        logr.info("No config file given, using the built-in realm list.")
        return dict(DEFAULT_CONFIG)

    try:
        with open(Path(path), 'r') as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file {path} does not exist") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Config file {path} is not valid YAML: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file {path} must hold a mapping")

    return {**DEFAULT_CONFIG, **config}


def parse_settings(config):

    batch_size = int(config['deposit_batch_size'])
    if not 0 < batch_size <= MAX_DEPOSITS_PER_SIMULATION:
        raise ConfigurationError(f"deposit_batch_size must be in 1..{MAX_DEPOSITS_PER_SIMULATION}, got {batch_size}")

    policy = config['failure_policy']
    if policy not in ('zero', 'propagate'):
        raise ConfigurationError(f"failure_policy must be 'zero' or 'propagate', got {policy!r}")

    max_concurrency = int(config['max_concurrency'])
    if max_concurrency < 1:
        raise ConfigurationError(f"max_concurrency must be positive, got {max_concurrency}")

    return DelegationSettings(
        delegate=as_pubkey(config['delegate'], 'delegate'),
        vsr_program=as_pubkey(config['vsr_program'], 'vsr_program'),
        simulation_wallet=as_pubkey(config['simulation_wallet'], 'simulation_wallet'),
        compute_unit_limit=int(config['compute_unit_limit']),
        deposit_batch_size=batch_size,
        max_concurrency=max_concurrency,
        failure_policy=policy,
    )


def parse_realms(config):

    realms = []
    seen = set()

    for entry in config.get('realms') or []:
        try:
            realm = RealmConfig.from_dict(entry, default_governance_program=config['governance_program'])
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Bad realm entry {entry!r}: {e}") from e

        if realm.slug in seen:
            raise ConfigurationError(f"Realm slug {realm.slug} is listed twice")
        seen.add(realm.slug)

        realms.append(realm)

    return realms


def load_config(path=None):
    """(DelegationSettings, [RealmConfig]) from a YAML file, or the built-in defaults."""

    config = read_config_file(path)

    settings = parse_settings(config)
    realms = parse_realms(config)

    logr.info(f"Loaded {len(realms)} realm(s), delegate={settings.delegate}, policy={settings.failure_policy}")

    return settings, realms
