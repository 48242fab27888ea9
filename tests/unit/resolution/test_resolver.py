"""
Unit tests for the ConcertResolver.

Covers match ordering (exact, fuzzy, word overlap), grouping invariants, and
output materialization.
"""

import random
from datetime import datetime, timezone

from concert_catalog.resolution.resolver import (
    ConcertResolver,
    MatchStrategy,
    SourceRef,
)
from concert_catalog.schemas.concert import SourceBatch

VENUE_SOURCE = "Kaufman Music Center"
AGGREGATOR_SOURCE = "New York Concert Review"


def _groups_by_title(report):
    """Map each canonical title to the sorted source names merged into it."""
    by_id = {c.id: c for c in report.concerts}
    return {
        by_id[cid].title: sorted(ref.source_name for ref in refs)
        for cid, refs in report.groups.items()
    }


class TestMatching:
    """Tests for how incoming records find their canonical entry."""

    def test_fuzzy_prefix_rule(self, resolver, create_batch):
        """Venue variants plus a title prefix merge into one concert."""
        batches = [
            create_batch(
                AGGREGATOR_SOURCE,
                {"venue": "Merkin Concert Hall", "date": "2026-03-01", "title": "Spring Gala"},
            ),
            create_batch(
                "Another Listings Site",
                {
                    "venue": "Merkin Hall",
                    "date": "2026-03-01T19:00:00",
                    "title": "Spring Gala Concert",
                },
            ),
        ]

        report = resolver.resolve_with_report(batches)

        assert len(report.concerts) == 1
        assert report.strategy_counts == {"created": 1, "fuzzy": 1}

    def test_word_overlap_rule(self, resolver, create_batch):
        batches = [
            create_batch(
                AGGREGATOR_SOURCE,
                {"venue": "Carnegie Hall", "date": "2026-05-01", "title": "NY Phil plays Beethoven"},
            ),
            create_batch(
                "Another Listings Site",
                {
                    "venue": "Carnegie Hall",
                    "date": "2026-05-01",
                    "title": "New York Philharmonic: Beethoven Symphony",
                },
            ),
        ]

        report = resolver.resolve_with_report(batches)

        assert len(report.concerts) == 1
        assert report.strategy_counts[MatchStrategy.WORD_OVERLAP.value] == 1

    def test_unrelated_titles_stay_separate(self, resolver, create_batch):
        batches = [
            create_batch(
                AGGREGATOR_SOURCE,
                {"venue": "Carnegie Hall", "date": "2026-05-01", "title": "NY Phil plays Beethoven"},
                {"venue": "Carnegie Hall", "date": "2026-05-01", "title": "Quartet plays Brahms"},
            ),
        ]

        assert len(resolver.resolve(batches)) == 2

    def test_exact_performer_key(self, resolver, create_batch):
        """Different titles with the same primary performer match exactly."""
        batches = [
            create_batch(
                AGGREGATOR_SOURCE,
                {"title": "Jane Doe in Recital", "performers": "Jane Doe, piano"},
            ),
            create_batch(
                "Another Listings Site",
                {"title": "Chopin Ballades", "performers": ["Jane Doe"]},
            ),
        ]

        report = resolver.resolve_with_report(batches)

        assert len(report.concerts) == 1
        assert report.strategy_counts[MatchStrategy.EXACT.value] == 1

    def test_venue_gate(self, resolver, create_batch):
        """Identical titles at different venues are never merged."""
        batches = [
            create_batch(AGGREGATOR_SOURCE, {"title": "Spring Gala", "venue": "Merkin Hall"}),
            create_batch(VENUE_SOURCE, {"title": "Spring Gala", "venue": "Alice Tully Hall"}),
        ]

        assert len(resolver.resolve(batches)) == 2

    def test_date_gate(self, resolver, create_batch):
        """Identical titles on different calendar dates are never merged."""
        batches = [
            create_batch(AGGREGATOR_SOURCE, {"title": "Spring Gala", "date": "2026-03-01T23:00:00"}),
            create_batch(VENUE_SOURCE, {"title": "Spring Gala", "date": "2026-03-02T00:30:00"}),
        ]

        assert len(resolver.resolve(batches)) == 2

    def test_all_keys_registered_on_merge(self, resolver, create_batch):
        """A key learned through a merge lets a later record match exactly."""
        batches = [
            create_batch(AGGREGATOR_SOURCE, {"title": "Brahms and Dvorak"}),
            # Title-key exact hit; also registers the performer key "johnroe"
            create_batch(VENUE_SOURCE, {"title": "Brahms and Dvorak", "performers": "John Roe"}),
            # Matches only through the performer key registered above
            create_batch("Third Site", {"title": "Evening Program", "performers": "John Roe, cello"}),
        ]

        report = resolver.resolve_with_report(batches)

        assert len(report.concerts) == 1
        assert report.strategy_counts == {"created": 1, "exact": 2}

    def test_entries_are_never_coalesced(self, resolver, create_batch):
        """Two separately created entries stay apart even if a later record bridges them."""
        batches = [
            create_batch(
                AGGREGATOR_SOURCE,
                {"title": "Mozart Requiem", "performers": "Jane Doe"},
                {"title": "Evening Choral Works", "performers": "John Roe"},
            ),
            # Its performer key hits the first entry, its title key the second
            create_batch(
                "Another Listings Site",
                {"title": "Evening Choral Works", "performers": "Jane Doe"},
            ),
        ]

        report = resolver.resolve_with_report(batches)

        assert len(report.concerts) == 2


class TestMergeOutcome:
    """Tests for field values on merged canonical concerts."""

    def test_precedence_table(self, resolver, create_batch):
        batches = [
            create_batch(
                AGGREGATOR_SOURCE,
                {"title": "Spring Gala", "price": "See website", "program": "Beethoven Symphony No.5"},
            ),
            create_batch(VENUE_SOURCE, {"title": "Spring Gala", "price": "$40"}),
        ]

        [concert] = resolver.resolve(batches)

        assert concert.price == "$40"
        assert concert.program == "Beethoven Symphony No.5"
        assert concert.source_name == VENUE_SOURCE

    def test_tag_union(self, resolver, create_batch):
        batches = [
            create_batch(AGGREGATOR_SOURCE, {"title": "Spring Gala", "tags": ["chamber"]}),
            create_batch(VENUE_SOURCE, {"title": "Spring Gala", "tags": ["free", "chamber"]}),
        ]

        [concert] = resolver.resolve(batches)

        assert set(concert.tags) == {"chamber", "free"}

    def test_completeness_tie_break(self, resolver, create_batch):
        """Between two aggregator records, the one with an address is kept."""
        batches = [
            create_batch(AGGREGATOR_SOURCE, {"title": "Spring Gala"}),
            create_batch(
                "Another Listings Site",
                {"title": "Spring Gala", "address": "129 W 67th St", "source_url": "https://b.example/1"},
            ),
        ]

        [concert] = resolver.resolve(batches)

        assert concert.address == "129 W 67th St"
        assert concert.source_name == "Another Listings Site"

    def test_same_classification_tie_keeps_first(self, resolver, create_batch):
        batches = [
            create_batch(AGGREGATOR_SOURCE, {"title": "Spring Gala", "price": "$10"}),
            create_batch("Another Listings Site", {"title": "Spring Gala", "price": "$12"}),
        ]

        [concert] = resolver.resolve(batches)

        assert concert.price == "$10"


class TestMaterialization:
    """Tests for the canonical concerts emitted at the end of a run."""

    def test_ids_and_timestamps(self, resolver, create_batch, fixed_now):
        batches = [create_batch(AGGREGATOR_SOURCE, {"title": "A Concert"}, {"title": "B Concert"})]

        concerts = resolver.resolve(batches)

        assert [c.id for c in concerts] == ["concert-1", "concert-2"]
        assert all(c.created_at == fixed_now and c.updated_at == fixed_now for c in concerts)
        assert all(c.description is None for c in concerts)

    def test_fresh_ids_each_run(self, create_batch):
        resolver = ConcertResolver()
        batches = [create_batch(AGGREGATOR_SOURCE, {"title": "A Concert"})]

        first = resolver.resolve(batches)
        second = resolver.resolve(batches)

        assert first[0].id != second[0].id

    def test_source_url_falls_back_to_base_url(self, resolver, create_batch):
        batches = [
            create_batch(AGGREGATOR_SOURCE, {"title": "A Concert"}, source_url="https://nycr.example"),
            create_batch(
                "Another Listings Site",
                {"title": "B Concert", "source_url": "https://b.example/e/9"},
            ),
        ]

        by_title = {c.title: c for c in resolver.resolve(batches)}

        assert by_title["A Concert"].source_url == "https://nycr.example"
        assert by_title["B Concert"].source_url == "https://b.example/e/9"

    def test_preserves_time_of_day(self, resolver, create_batch):
        batches = [create_batch(VENUE_SOURCE, {"title": "A Concert", "date": "2026-03-01T19:30:00-05:00"})]

        [concert] = resolver.resolve(batches)

        assert concert.date.hour == 19 and concert.date.minute == 30

    def test_empty_input(self, resolver):
        report = resolver.resolve_with_report([])

        assert report.concerts == []
        assert report.total_records == 0

    def test_batch_without_concerts(self, resolver):
        assert resolver.resolve([SourceBatch(source_name="Empty Source")]) == []


class TestInvariants:
    """Grouping properties that hold for any input."""

    def _sample_batches(self, create_batch):
        return [
            create_batch(
                AGGREGATOR_SOURCE,
                {"venue": "Merkin Concert Hall", "date": "2026-03-01", "title": "Spring Gala"},
                {"venue": "Carnegie Hall", "date": "2026-05-01", "title": "NY Phil plays Beethoven"},
                {"venue": "Carnegie Hall", "date": "2026-05-01", "title": "Quartet plays Brahms"},
                {"venue": "Alice Tully Hall", "date": "2026-04-10", "title": "Bach Cello Suites",
                 "performers": "Jane Doe, cello"},
            ),
            create_batch(
                VENUE_SOURCE,
                {"venue": "Merkin Hall", "date": "2026-03-01T19:00:00", "title": "Spring Gala Concert",
                 "price": "$40"},
                {"venue": "Merkin Hall", "date": "2026-03-02T19:00:00", "title": "Spring Gala Concert"},
            ),
            create_batch(
                "Juilliard",
                {"venue": "Carnegie Hall", "date": "2026-05-01",
                 "title": "New York Philharmonic: Beethoven Symphony"},
                {"venue": "Alice Tully", "date": "2026-04-10T20:00:00", "title": "Suites for Solo Cello",
                 "performers": ["Jane Doe"]},
            ),
        ]

    def test_identity_preservation(self, resolver, create_batch):
        """Every input record lands in exactly one canonical concert."""
        batches = self._sample_batches(create_batch)
        total_inputs = sum(len(b.concerts) for b in batches)

        report = resolver.resolve_with_report(batches)

        refs = [ref for members in report.groups.values() for ref in members]
        assert report.total_records == total_inputs
        assert len(set(refs)) == total_inputs
        assert set(report.groups) == {c.id for c in report.concerts}
        assert SourceRef(AGGREGATOR_SOURCE, 0) in refs

    def test_expected_grouping(self, resolver, create_batch):
        report = resolver.resolve_with_report(self._sample_batches(create_batch))

        assert len(report.concerts) == 5
        assert report.merged_records == 3

    def test_idempotence(self, resolver, create_batch):
        """Resolving the catalog again as one source merges nothing further."""
        first = resolver.resolve(self._sample_batches(create_batch))
        again = SourceBatch(
            source_name="Catalog",
            concerts=[c.to_extracted() for c in first],
        )

        second = resolver.resolve([again])

        assert len(second) == len(first)

    def test_resolves_own_output_directly(self, resolver, create_batch):
        """Canonical concerts can be fed back in as a batch without conversion."""
        first = resolver.resolve(self._sample_batches(create_batch))

        second = resolver.resolve([SourceBatch(source_name="Catalog", concerts=first)])

        assert len(second) == len(first)
        assert {c.source_name for c in second} == {"Catalog"}
        assert {c.id for c in second}.isdisjoint(c.id for c in first)

    def test_source_order_does_not_change_grouping(self, create_batch):
        """Shuffling source order changes at most which fields win, not the groups."""
        batches = self._sample_batches(create_batch)

        def grouping(ordered):
            report = ConcertResolver().resolve_with_report(ordered)
            return sorted(
                sorted((ref.source_name, ref.index) for ref in refs)
                for refs in report.groups.values()
            )

        baseline = grouping(batches)
        rng = random.Random(7)
        for _ in range(5):
            shuffled = batches[:]
            rng.shuffle(shuffled)
            assert grouping(shuffled) == baseline

    def test_deterministic_for_fixed_order(self, create_batch, fixed_now):
        batches = self._sample_batches(create_batch)

        def run():
            resolver = ConcertResolver(clock=lambda: fixed_now, id_factory=lambda: "x")
            return [c.model_dump() for c in resolver.resolve(batches)]

        assert run() == run()

    def test_naive_and_aware_dates_share_a_day(self, resolver, create_batch):
        batches = [
            create_batch(AGGREGATOR_SOURCE, {"title": "Spring Gala", "date": "2026-03-01"}),
            create_batch(
                VENUE_SOURCE,
                {"title": "Spring Gala", "date": datetime(2026, 3, 1, 19, tzinfo=timezone.utc)},
            ),
        ]

        assert len(resolver.resolve(batches)) == 1
