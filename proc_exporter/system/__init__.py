from .processes import (
    NOT_FOUND_PID,
    ProcessResolver,
    ProcessSample,
    ProcessSampler,
    Resolution,
    SampleFailure,
)

__all__ = [
    "NOT_FOUND_PID",
    "ProcessResolver",
    "ProcessSample",
    "ProcessSampler",
    "Resolution",
    "SampleFailure",
]
