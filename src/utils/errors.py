# error taxonomy shared by the catalog client, the engine and the store


class EMarketError(Exception):
    """Base class for every error raised by the e-market engine."""


class NetworkError(EMarketError):
    """
    Transport or HTTP failure while talking to the catalog service.
    Recovered at the fetch boundary of the catalog cache.
    """


class FetchTimeoutError(NetworkError):
    """The catalog fetch did not complete within the configured timeout."""


class FetchCancelledError(NetworkError):
    """The in-flight catalog fetch was cancelled explicitly."""


class DecodeError(EMarketError):
    """The catalog payload could not be decoded into products."""


class StoreError(EMarketError):
    """
    Persistence failure in the local cart/favorites database.
    There is no recovery path, callers let it propagate.
    """
