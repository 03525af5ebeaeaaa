from datetime import date

from dayplanner.features.reminders.ledger import FiredLedger, OccurrenceKey


def test_mark_fired_is_idempotent():
    """Marking the same key twice records it once."""
    ledger = FiredLedger()
    key = OccurrenceKey("a", 530, date(2024, 6, 1))
    assert not ledger.has_fired(key)
    assert ledger.mark_fired(key) is True
    assert ledger.mark_fired(key) is False
    assert ledger.has_fired(key)
    assert len(ledger) == 1


def test_keys_are_independent():
    """Task, trigger minute and date each distinguish an occurrence."""
    ledger = FiredLedger()
    ledger.mark_fired(OccurrenceKey("a", 530, date(2024, 6, 1)))
    assert not ledger.has_fired(OccurrenceKey("b", 530, date(2024, 6, 1)))
    assert not ledger.has_fired(OccurrenceKey("a", 530, date(2024, 6, 2)))
    assert not ledger.has_fired(OccurrenceKey("a", 520, date(2024, 6, 1)))


def test_prune_before_drops_only_past_dates():
    """Pruning removes keys dated before the cutoff and keeps the rest."""
    ledger = FiredLedger()
    old = OccurrenceKey("a", 530, date(2024, 5, 31))
    today = OccurrenceKey("a", 530, date(2024, 6, 1))
    ledger.mark_fired(old)
    ledger.mark_fired(today)

    assert ledger.prune_before(date(2024, 6, 1)) == 1
    assert old not in ledger
    assert today in ledger
    assert ledger.prune_before(date(2024, 6, 1)) == 0
