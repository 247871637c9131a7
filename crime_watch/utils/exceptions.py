class CrimeWatchError(Exception):
    """Base Exception Class"""
    pass
class TransportError(CrimeWatchError):
    """Error class for when the police API can't be reached or returns something unusable"""
    pass
class CacheReadError(CrimeWatchError):
    """Error reading the checkpoint or diagnostics from the cache"""
    pass
class CacheWriteError(CrimeWatchError):
    """Error writing the checkpoint or diagnostics to the cache"""
    pass
class ConfigError(CrimeWatchError):
    """Config Error"""
    pass
class DegenerateBaselineError(CrimeWatchError):
    """A category has a zero baseline average but a non-zero current count"""
    pass
