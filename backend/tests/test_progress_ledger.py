"""
Progress ledger: atomic point/streak mutations over the in-memory store.

Run with: pytest backend/tests/test_progress_ledger.py -v
"""

from __future__ import annotations

import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from sparkvibe.core.config import Tuning
from sparkvibe.core.errors import InvalidArgument, NotFound, ServiceUnavailable
from sparkvibe.domain.progress import MemoryProgressStore, ProgressLedger


@pytest.fixture
def user(ledger):
    return ledger.register("user-1", "Sparky").user_id


class TestRegister:
    def test_new_record_defaults(self, ledger, clock):
        rec = ledger.register("user-1", "  Sparky  ")
        assert rec.display_name == "Sparky"
        assert (rec.total_points, rec.streak, rec.best_streak, rec.level) == (0, 0, 0, 1)
        assert rec.created_at == clock.now
        assert rec.version == 0

    def test_register_is_idempotent(self, ledger):
        first = ledger.register("user-1", "Sparky")
        ledger.record_card_share("user-1")
        again = ledger.register("user-1", "Someone Else")
        assert again.display_name == "Sparky"
        assert again.total_points == first.total_points + 15

    def test_blank_user_id_rejected(self, ledger, store):
        with pytest.raises(InvalidArgument):
            ledger.register("   ")
        assert len(store) == 0

    def test_get_unknown_user(self, ledger):
        with pytest.raises(NotFound):
            ledger.get("ghost")


class TestDailyCheckin:
    def test_concrete_streak_scenario(self, ledger, clock, user):
        rec = ledger.record_daily_checkin(user, points=10)
        assert (rec.total_points, rec.streak, rec.best_streak) == (10, 1, 1)

        clock.advance(days=1)
        rec = ledger.record_daily_checkin(user, points=10)
        assert (rec.total_points, rec.streak, rec.best_streak) == (20, 2, 2)

        clock.advance(days=4)
        rec = ledger.record_daily_checkin(user, points=10)
        assert (rec.total_points, rec.streak, rec.best_streak) == (30, 1, 2)

    def test_default_award_comes_from_tuning(self, store, clock):
        ledger = ProgressLedger(store, Tuning(daily_checkin_points=7), clock=clock)
        ledger.register("u")
        assert ledger.record_daily_checkin("u").total_points == 7

    def test_same_day_awards_points_but_not_streak(self, ledger, clock, user):
        ledger.record_daily_checkin(user)
        clock.advance(hours=3)
        rec = ledger.record_daily_checkin(user)
        assert rec.total_points == 20
        assert rec.streak == 1

    def test_utc_midnight_boundary(self, ledger, clock, user):
        clock.now = datetime(2026, 3, 10, 23, 59, tzinfo=timezone.utc)
        ledger.record_daily_checkin(user)
        clock.advance(minutes=2)
        rec = ledger.record_daily_checkin(user)
        assert rec.streak == 2

    def test_activity_yesterday_extends_streak(self, ledger, clock, user):
        ledger.record_daily_checkin(user)
        clock.advance(days=1)
        ledger.record_mood_analysis(user, "chill")
        clock.advance(days=1)
        before = ledger.get(user)
        assert before.last_activity.date() == date(2026, 3, 11)
        rec = ledger.record_daily_checkin(user)
        assert (rec.streak, rec.best_streak) == (2, 2)

    def test_activity_before_first_checkin_starts_at_one(self, ledger, user):
        ledger.record_choice(user, "Dance", "cap-1")
        rec = ledger.record_daily_checkin(user)
        assert (rec.streak, rec.best_streak) == (1, 1)

    def test_activity_earlier_today_holds_streak(self, ledger, clock, user):
        ledger.record_daily_checkin(user)
        clock.advance(days=1)
        ledger.record_card_share(user)
        rec = ledger.record_daily_checkin(user)
        assert rec.streak == 1
        assert rec.total_points == 10 + 15 + 10

    def test_activity_counts_on_its_own_date(self, ledger, clock, user):
        ledger.record_daily_checkin(user)
        clock.advance(days=3)
        ledger.record_mood_analysis(user, "sad", at=clock.now - timedelta(days=1))
        rec = ledger.record_daily_checkin(user)
        assert rec.streak == 2

    def test_level_tracks_points(self, ledger, user):
        rec = ledger.record_daily_checkin(user, points=499)
        assert rec.level == 1
        rec = ledger.record_daily_checkin(user, points=1)
        assert rec.level == 2

    @pytest.mark.parametrize("points", [0, -5, True, 2.5, "10"])
    def test_bad_points_rejected_without_mutation(self, ledger, user, points):
        with pytest.raises(InvalidArgument):
            ledger.record_daily_checkin(user, points=points)
        assert ledger.get(user).version == 0

    def test_unknown_action_rejected(self, ledger, user):
        with pytest.raises(InvalidArgument):
            ledger.record_daily_checkin(user, action="free_points")

    def test_unknown_user(self, ledger):
        with pytest.raises(NotFound):
            ledger.record_daily_checkin("ghost")


class TestQualifyingActions:
    def test_mood_history_appends(self, ledger, clock, user):
        ledger.record_mood_analysis(user, "Happy", 0.8)
        rec = ledger.record_mood_analysis(user, "sad")
        assert [m.mood for m in rec.mood_history] == ["happy", "sad"]
        assert rec.mood_history[0].confidence == 0.8
        assert rec.last_activity == clock.now
        assert rec.total_points == 0

    def test_confidence_out_of_range(self, ledger, user):
        with pytest.raises(InvalidArgument):
            ledger.record_mood_analysis(user, "happy", 1.5)

    def test_future_timestamps_are_capped(self, ledger, clock, user):
        rec = ledger.record_mood_analysis(user, "happy", at=clock.now + timedelta(days=3))
        assert rec.mood_history[-1].at == clock.now

    def test_last_activity_never_moves_backwards(self, ledger, clock, user):
        ledger.record_card_share(user)
        rec = ledger.record_choice(user, "Dance", "cap-1", at=clock.now - timedelta(days=2))
        assert rec.last_activity == clock.now
        assert rec.choices[-1].at == clock.now - timedelta(days=2)

    def test_choice_requires_capsule(self, ledger, user):
        with pytest.raises(InvalidArgument):
            ledger.record_choice(user, "Dance", " ")

    def test_completion(self, ledger, user):
        rec = ledger.record_completion(user, "cap-1", 40)
        assert rec.adventures_completed == 1
        assert rec.total_points == 40

    def test_completion_needs_positive_points(self, ledger, user):
        with pytest.raises(InvalidArgument):
            ledger.record_completion(user, "cap-1", 0)

    def test_card_generation(self, ledger, user):
        rec = ledger.record_card_generation(user, {"template": "sunset"})
        assert rec.cards_generated == 1
        assert rec.total_points == 25

    def test_card_generation_needs_metadata(self, ledger, user):
        with pytest.raises(InvalidArgument):
            ledger.record_card_generation(user, {})

    def test_card_share(self, ledger, user):
        rec = ledger.record_card_share(user)
        assert rec.cards_shared == 1
        assert rec.total_points == 15

    def test_every_write_bumps_version(self, ledger, user):
        ledger.record_card_share(user)
        ledger.record_mood_analysis(user, "chill")
        assert ledger.get(user).version == 2


class TestAtomicity:
    def test_concurrent_writers_lose_nothing(self, clock):
        store = MemoryProgressStore()
        ledger = ProgressLedger(store, Tuning(ledger_max_retries=10_000), clock=clock)
        ledger.register("busy")

        def worker():
            for _ in range(25):
                ledger.record_card_share("busy")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        rec = ledger.get("busy")
        assert rec.cards_shared == 200
        assert rec.total_points == 200 * 15
        assert rec.version == 200

    def test_retries_exhausted(self, clock):
        class AlwaysStale(MemoryProgressStore):
            def replace(self, record, expected_version):
                return False

        ledger = ProgressLedger(AlwaysStale(), Tuning(ledger_max_retries=3), clock=clock)
        ledger.register("u")
        with pytest.raises(ServiceUnavailable):
            ledger.record_card_share("u")
        assert ledger.get("u").total_points == 0

    def test_store_outage_surfaces(self, clock):
        class Down(MemoryProgressStore):
            def get(self, user_id):
                raise ServiceUnavailable("db down")

        ledger = ProgressLedger(Down(), clock=clock)
        with pytest.raises(ServiceUnavailable):
            ledger.record_daily_checkin("u")
