"""Exceptions raised by the Data Cloud integration."""


class DataCloudError(Exception):
    """Base class for all Data Cloud errors."""


class InvalidQueryDefinitionError(DataCloudError):
    """A query definition carries neither static SQL nor a query builder."""


class QueryExecutionError(DataCloudError):
    """The Data Cloud query API rejected or failed to run a query."""


class AuthorizationError(DataCloudError):
    """A connection could not be authorized."""


class TransformError(DataCloudError):
    """Result rows could not be mapped to named records."""


class ConfigurationError(DataCloudError):
    """Required configuration is missing or invalid."""
