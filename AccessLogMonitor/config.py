import os
from dataclasses import dataclass, field


def _defaultPollInterval() -> float:
    return float(os.getenv("ACCESS_LOG_MONITOR_POLL_INTERVAL", 1.0))


@dataclass
class Config:
    """ Monitor settings, all durations in seconds """

    # How often, and how many of, the top sections get reported
    reportInterval: float = 10
    reportLimit: int = 10

    # Alert when hits within the window, averaged over all known sections, exceed the threshold
    trafficWindow: float = 120
    trafficThreshold: int = 10

    # How long to wait for the log file to grow before checking it again
    pollInterval: float = field(default_factory=_defaultPollInterval)

    def validate(self) -> "Config":
        if self.reportInterval <= 0:
            raise ValueError(f"Report interval must be positive: {self.reportInterval}")
        if self.reportLimit < 0:
            raise ValueError(f"Report limit can't be negative: {self.reportLimit}")
        if self.trafficWindow <= 0:
            raise ValueError(f"Traffic window must be positive: {self.trafficWindow}")
        if self.trafficThreshold < 0:
            raise ValueError(
                f"Traffic threshold can't be negative: {self.trafficThreshold}"
            )
        if self.pollInterval <= 0:
            raise ValueError(f"Poll interval must be positive: {self.pollInterval}")
        return self
