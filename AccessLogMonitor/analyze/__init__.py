from .rankedIndex import RankedSectionIndex, SectionRecord
from .spikeDetector import TrafficSpikeDetector
from .tracker import Snapshot, Tracker
