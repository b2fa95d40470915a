import enum
from dataclasses import dataclass


@dataclass
class Event:
    """ Represents an individual event """

    class Priority(enum.IntEnum):
        LOW = 0
        MEDIUM = 1
        HIGH = 2
        SEVERE = 3

    time: int
    message: str
    priority: Priority

    def __repr__(self) -> str:
        return f"{self.time} {self.message}"


@dataclass
class TrafficEvent(Event):
    """ Raised when traffic crosses the alerting threshold, either way """

    class Kind(enum.Enum):
        SPIKE = "spike"
        RECOVERY = "recovery"

    kind: Kind
    windowTraffic: int
