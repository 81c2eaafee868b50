from datetime import datetime

from morningproof.models.achievements import (
    ALL_ACHIEVEMENTS,
    AchievementCategory,
    AchievementStats,
    UserAchievements,
)

NOW = datetime(2025, 3, 10, 7, 0)


def _ids(achievements):
    return {a.id for a in achievements}


def test_catalog_ids_are_unique():
    ids = [a.id for a in ALL_ACHIEVEMENTS]
    assert len(ids) == len(set(ids)) == 34


def test_streak_milestones_unlock_once():
    user = UserAchievements()
    newly = user.check_and_unlock_all(AchievementStats(current_streak=7, total_completions=7), NOW)

    assert _ids(newly) == {"first_bed", "three_days", "one_week", "perfect_week"}
    assert user.get_unlocked_date("one_week") == NOW
    assert user.check_and_unlock_all(AchievementStats(current_streak=7, total_completions=7), NOW) == []


def test_total_completion_milestones():
    user = UserAchievements()
    newly = user.check_and_unlock_all(AchievementStats(total_completions=25), NOW)
    assert {"total_10", "total_25"} <= _ids(newly)
    assert "total_50" not in _ids(newly)


def test_early_bird_counts_completions_before_hour():
    user = UserAchievements()
    newly = user.check_and_unlock_all(AchievementStats(early_completions={6: 1}), NOW)
    assert "early_bird_1" in _ids(newly)
    assert "super_early_1" not in _ids(newly)

    newly = user.check_and_unlock_all(AchievementStats(early_completions={5: 1, 6: 1}), NOW)
    assert "super_early_1" in _ids(newly)


def test_comeback_achievements():
    user = UserAchievements()
    newly = user.check_and_unlock_all(
        AchievementStats(current_streak=1, last_lost_streak=7, comeback_count=1), NOW
    )
    assert "bounce_back" in _ids(newly)
    assert "phoenix_rising" not in _ids(newly)

    newly = user.check_and_unlock_all(
        AchievementStats(current_streak=14, last_lost_streak=7, comeback_count=3), NOW
    )
    assert {"phoenix_rising", "never_give_up"} <= _ids(newly)


def test_bounce_back_needs_a_long_lost_streak():
    user = UserAchievements()
    newly = user.check_and_unlock_all(
        AchievementStats(current_streak=1, last_lost_streak=6, comeback_count=1), NOW
    )
    assert "bounce_back" not in _ids(newly)


def test_special_achievements():
    user = UserAchievements()
    newly = user.check_and_unlock_all(
        AchievementStats(
            completed_weekends=4,
            monday_completions=5,
            has_new_year_completion=True,
            locked_in_within_minutes_of_wake=3,
        ),
        NOW,
    )
    assert {
        "weekend_warrior_1",
        "weekend_warrior_4",
        "monday_motivation_5",
        "new_year",
        "speed_demon",
    } <= _ids(newly)
    assert "monday_motivation_10" not in _ids(newly)


def test_hidden_achievements_appear_once_unlocked():
    user = UserAchievements()
    assert "new_year" not in _ids(user.visible_achievements())
    assert "speed_demon" not in _ids(user.visible_achievements())

    user.check_and_unlock_all(AchievementStats(has_new_year_completion=True), NOW)
    assert "new_year" in _ids(user.visible_achievements())


def test_next_achievement_is_first_locked_streak_milestone():
    user = UserAchievements()
    assert user.next_achievement.id == "first_bed"

    user.check_and_unlock_all(AchievementStats(current_streak=3), NOW)
    assert user.next_achievement.id == "one_week"


def test_unlocked_count_by_category():
    user = UserAchievements()
    user.check_and_unlock_all(AchievementStats(current_streak=3, total_completions=10), NOW)

    counts = user.unlocked_count_by_category()
    assert counts[AchievementCategory.STREAK] == 2
    assert counts[AchievementCategory.CUMULATIVE] == 1
    assert counts[AchievementCategory.SPECIAL] == 0
    assert user.unlocked_count == 3
