class TracerError(Exception):
    pass


class DataSourceError(TracerError):
    pass


class RateLimitError(DataSourceError):
    pass


class InvalidFlowRequest(TracerError):
    pass


class TraceTimeoutError(TracerError):
    pass
