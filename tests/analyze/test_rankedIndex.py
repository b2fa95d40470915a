import random
import unittest
from AccessLogMonitor.analyze.rankedIndex import RankedSectionIndex, SectionRecord


class TestRankedSectionIndex(unittest.TestCase):
    "Sections stay ranked by descending hits as they're upserted"

    def _assertConsistent(self, index: RankedSectionIndex) -> None:
        ranking = index._ranking
        self.assertEqual(len(ranking), len(index._sections))
        for position, record in enumerate(ranking):
            self.assertIs(index._sections[record.section], record)
            self.assertEqual(position, record.position)
            if position > 0:
                self.assertGreaterEqual(ranking[position - 1].hits, record.hits)

    def testRankingOrder(self):
        index = RankedSectionIndex()
        index.upsert("first")
        index.upsert("second")
        self.assertEqual(
            ["first", "second"], [r.section for r in index.topN(2)], "Ties keep insertion order"
        )

        # Move second before first
        index.upsert("second")
        self.assertEqual(["second", "first"], [r.section for r in index.topN(2)])
        self.assertEqual(
            [SectionRecord("second", 2, 0), SectionRecord("first", 1, 1)], index.topN(2)
        )

    def testTiesKeepEarlierFirst(self):
        index = RankedSectionIndex()
        for section in ["a", "b", "c", "c", "b"]:
            index.upsert(section)
        # c got to 2 hits before b did
        self.assertEqual(["c", "b", "a"], [r.section for r in index.topN(3)])

        index.upsert("a")
        index.upsert("a")
        self.assertEqual(["a", "c", "b"], [r.section for r in index.topN(3)])

    def testBubblesPastSeveral(self):
        index = RankedSectionIndex()
        for section in ["a", "a", "b", "c", "d", "d"]:
            index.upsert(section)
        self.assertEqual(["a", "d", "b", "c"], [r.section for r in index.topN(10)])

        index.upsert("c")
        self.assertEqual(["a", "d", "c", "b"], [r.section for r in index.topN(10)])
        index.upsert("c")
        self.assertEqual(["c", "a", "d", "b"], [r.section for r in index.topN(10)])
        self._assertConsistent(index)

    def testTopNLimits(self):
        index = RankedSectionIndex()
        self.assertEqual([], index.topN(5), "Empty index")

        for section in ["x", "y", "z"]:
            index.upsert(section)
        self.assertEqual([], index.topN(0))
        self.assertEqual([], index.topN(-1))
        self.assertEqual(1, len(index.topN(1)))
        self.assertEqual(3, len(index.topN(100)), "Limit beyond size is clamped")

    def testTopNReturnsCopies(self):
        index = RankedSectionIndex()
        index.upsert("api")
        top = index.topN(1)
        top[0].hits = 1000
        index.upsert("api")
        self.assertEqual(2, index.topN(1)[0].hits)
        self.assertEqual(1000, top[0].hits, "Earlier copy isn't touched by later upserts")

        upserted = index.upsert("api")
        upserted.hits = -1
        self.assertEqual(3, index.get("api").hits)

    def testSizeAndLookup(self):
        index = RankedSectionIndex()
        self.assertEqual(0, index.size())
        self.assertIsNone(index.get("api"))

        index.upsert("api")
        index.upsert("api")
        index.upsert("/")
        self.assertEqual(2, index.size())
        self.assertEqual(2, len(index))
        self.assertIn("/", index)
        self.assertNotIn("blog", index)
        self.assertEqual(SectionRecord("api", 2, 0), index.get("api"))

    def testRandomSequencesStaySorted(self):
        "Sorted, bijective and monotonic after every single upsert"
        rng = random.Random(2000)
        for _ in range(20):
            index = RankedSectionIndex()
            sections = [f"s{i}" for i in range(rng.randint(1, 30))]
            expectedHits = {}

            for _ in range(rng.randint(1, 400)):
                # Skewed so that some sections get far more hits than others
                section = sections[int(rng.random() ** 2 * len(sections))]
                before = index.get(section)
                record = index.upsert(section)
                expectedHits[section] = expectedHits.get(section, 0) + 1

                self.assertEqual(expectedHits[section], record.hits)
                if before is not None:
                    self.assertEqual(before.hits + 1, record.hits)
                self._assertConsistent(index)

            everything = index.topN(len(sections) + 1)
            self.assertEqual(set(expectedHits), {r.section for r in everything})
            self.assertEqual(len(expectedHits), len(everything), "No duplicates")
            self.assertEqual(expectedHits, {r.section: r.hits for r in everything})
