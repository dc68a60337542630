"""HTTP fetch layer shared by every pull-channel request."""

from .errors import FetchError, HTTPError, NetworkFailure, ParseFailure
from .fetch import FetchLayer, SleepFunc, extract_error_detail
from .retry import (
    COMMAND_POLICY,
    READ_POLICY,
    RetryPolicy,
    command_policy_from_settings,
    read_policy_from_settings,
)

__all__ = [
    "COMMAND_POLICY",
    "READ_POLICY",
    "FetchError",
    "FetchLayer",
    "HTTPError",
    "NetworkFailure",
    "ParseFailure",
    "RetryPolicy",
    "SleepFunc",
    "command_policy_from_settings",
    "extract_error_detail",
    "read_policy_from_settings",
]
