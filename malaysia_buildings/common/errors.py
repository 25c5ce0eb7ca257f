"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class ContractError(PipelineError):
    """Raised when an input or output contract is broken."""

    error_code = "CONTRACT_ERROR"


class StageError(PipelineError):
    """Raised for stage failures that should halt in strict mode."""

    error_code = "STAGE_ERROR"


class UserInputError(PipelineError):
    """Raised for requests the user has to correct before anything runs."""

    error_code = "USER_INPUT_ERROR"


class UnknownRegion(UserInputError):
    error_code = "UNKNOWN_REGION"


class FetchInProgress(UserInputError):
    error_code = "FETCH_IN_PROGRESS"


class EmptySelection(UserInputError):
    error_code = "EMPTY_SELECTION"


class TransportError(StageError):
    """Raised when a remote geodata or boundary service fails."""

    error_code = "TRANSPORT_ERROR"


class EmptyResultError(TransportError):
    """Raised when a fetch succeeds but leaves no usable records."""

    error_code = "EMPTY_RESULT"


class PolygonUnavailable(PipelineError):
    """Raised by a polygon strategy that produced nothing usable."""

    error_code = "POLYGON_UNAVAILABLE"
