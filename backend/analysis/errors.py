class ClimateAnalysisError(Exception):
    """Base class for every failure the analysis surfaces to its caller."""

    error_type = "analysis_error"


class InvalidInput(ClimateAnalysisError):
    """Missing or malformed lat / lon / date; raised before any fetching."""

    error_type = "invalid_input"


class UpstreamUnavailable(ClimateAnalysisError):
    """The remote data source cannot be reached or rejected authentication."""

    error_type = "upstream_unavailable"


class EmptySampleSet(ClimateAnalysisError):
    """A required sample set has no entries after the full year loop."""

    error_type = "no_data"

    def __init__(self, message: str, variable: str = ""):
        super().__init__(message)
        self.variable = variable


class FetchError(Exception):
    """One year's remote call failed. Always recovered inside the year loop."""

    def __init__(self, year: int, cause: BaseException):
        super().__init__(f"{year}: {cause}")
        self.year = year
        self.cause = cause
