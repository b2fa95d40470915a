import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional


@dataclass
class SectionRecord:
    """ Hits counted against one section, and where it currently ranks """

    section: str
    hits: int = 0
    position: int = -1


class RankedSectionIndex:
    """
    Keeps every section seen so far, ordered by descending hits at all times.

    Records are looked up by section in a dict and ranked in a separate list.
    Since a single upsert only ever adds one hit to one record, that record can
    only climb past the neighbours it now outnumbers, so it's bubbled up one
    position at a time instead of re-sorting the whole ranking.
    Equal hits keep their relative order, i.e. whoever got there first stays ahead.
    """

    def __init__(self):
        self._sections: Dict[str, SectionRecord] = {}
        self._ranking: List[SectionRecord] = []

    def upsert(self, section: str) -> SectionRecord:
        "Count one hit for the section, adding it at the bottom of the ranking if new"
        record = self._sections.get(section)
        if record is None:
            record = SectionRecord(section=section, position=len(self._ranking))
            self._sections[section] = record
            self._ranking.append(record)
            logging.debug(f"Tracking new section {section}")

        record.hits += 1
        self._bubbleUp(record)
        return replace(record)

    def _bubbleUp(self, record: SectionRecord) -> None:
        position = record.position
        while position > 0 and self._ranking[position - 1].hits < record.hits:
            predecessor = self._ranking[position - 1]
            self._ranking[position] = predecessor
            predecessor.position = position
            position -= 1

        self._ranking[position] = record
        record.position = position

    def topN(self, limit: int) -> List[SectionRecord]:
        "Copies of the `limit` most visited sections, best first"
        if limit <= 0:
            return []
        return [replace(record) for record in self._ranking[:limit]]

    def get(self, section: str) -> Optional[SectionRecord]:
        record = self._sections.get(section)
        return replace(record) if record is not None else None

    def size(self) -> int:
        return len(self._ranking)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, section: str) -> bool:
        return section in self._sections
