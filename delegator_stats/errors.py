class DelegatorStatsError(Exception):
    pass

class ConfigurationError(DelegatorStatsError):
    """Bad configuration or filter input.  Never widened into an unfiltered scan."""

class RetrievalError(DelegatorStatsError):
    """The ledger could not be scanned for a realm's delegators."""

class SimulationError(DelegatorStatsError):
    """A single wallet's voting power could not be computed."""

class AddressDerivationExhausted(DelegatorStatsError):
    pass

class RpcError(DelegatorStatsError):

    def __init__(self, method, message, code=None):
        self.method = method
        self.code = code
        super().__init__(f"{method} failed: {message}" + (f" (code={code})" if code is not None else ""))
