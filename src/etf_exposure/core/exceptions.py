"""Custom exceptions for the exposure engine."""


class EtfExposureError(Exception):
    """Base exception."""
    pass


class InvalidMixError(EtfExposureError):
    pass


class TooManyPositionsError(InvalidMixError):
    pass


class ExposureFetchError(EtfExposureError):
    pass


class ConfigurationError(EtfExposureError):
    pass


class UnknownBenchmarkError(EtfExposureError):
    pass
