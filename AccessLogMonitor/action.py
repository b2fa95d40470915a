from datetime import datetime
from typing import TYPE_CHECKING

from .event import Event, TrafficEvent

if TYPE_CHECKING:
    from .analyze.tracker import Snapshot


class Action:
    """ Interface for taking action based on events and statistics reports """

    def notify(self, e: Event) -> None:
        raise NotImplementedError()

    def report(self, snapshot: "Snapshot") -> None:
        raise NotImplementedError()


class TerminalNotifier(Action):
    """ Show notification messages and reports in terminal """

    class Colors:
        YELLOW = "\033[93m"
        RED = "\033[91m"
        BOLD = "\033[1m"
        ENDC = "\033[0m"

    _HEADER_WDTH = 80

    def __init__(self):
        # Print header at start
        # ================================================================================
        # |                              Access Log Monitor                              |
        # ================================================================================
        print("=" * TerminalNotifier._HEADER_WDTH)
        print(
            "|"
            + self.Colors.BOLD
            + "Access Log Monitor".center(TerminalNotifier._HEADER_WDTH - 2)
            + self.Colors.ENDC
            + "|"
        )
        print("=" * TerminalNotifier._HEADER_WDTH)

    def notify(self, e: Event) -> None:
        """
        Print alert to console, high priority colored accordingly.
        Traffic alerts are tagged with their kind, recoveries in yellow.
        """
        if isinstance(e, TrafficEvent) and e.kind == TrafficEvent.Kind.RECOVERY:
            color = self.Colors.YELLOW
        elif e.priority > Event.Priority.MEDIUM:
            color = self.Colors.RED
        else:
            color = self.Colors.BOLD

        message = e.message
        if isinstance(e, TrafficEvent):
            message = f"[{e.kind.value}] {message}"

        print(f"{color}{datetime.fromtimestamp(e.time)}{self.Colors.ENDC} - {message}")

    def report(self, snapshot: "Snapshot") -> None:
        """Print top sections as a two columns table, followed by totals"""
        hitsWidth = 12
        sectionWidth = TerminalNotifier._HEADER_WDTH - hitsWidth

        print("-" * TerminalNotifier._HEADER_WDTH)
        print(
            self.Colors.BOLD
            + "Section".ljust(sectionWidth)
            + "Hits".rjust(hitsWidth)
            + self.Colors.ENDC
        )
        for record in snapshot.topSections:
            print(record.section.ljust(sectionWidth) + str(record.hits).rjust(hitsWidth))

        summary = (
            f"{snapshot.sectionCount} sections, {snapshot.totalTraffic} hits, "
            f"{snapshot.requestsPerSecond:.2f} req/s"
        )
        if snapshot.isAlerting:
            summary += f" - {self.Colors.YELLOW}high traffic{self.Colors.ENDC}"
        print(summary)
