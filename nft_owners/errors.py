# -----------------------------
# Exceptions
# -----------------------------
class NftOwnersError(Exception): pass


# fatal, raised before any token is fetched
class SetupError(NftOwnersError): pass
class ConfigError(SetupError): pass


# transport level, always retryable
class RpcRateLimitError(NftOwnersError): pass
class RpcCallTimeout(NftOwnersError): pass


# run invariants
class DuplicateOutcomeError(NftOwnersError): pass
class IncompleteRunError(NftOwnersError): pass
