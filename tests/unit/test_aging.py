"""Tests for task aging classification."""

from datetime import datetime, timedelta

import pytest

from taskflow.aging import (
    AgingClassifier,
    AgingState,
    age_in_days,
    completed_age_in_days,
    format_age,
)
from taskflow.models.domain import Task

# Late in the day, so "2 days 23 hours ago" is still two calendar days back
NOW = datetime(2024, 3, 10, 23, 30)


def make_task(task_id="t1", created_at=None, completed=False, completed_at=None):
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        topic_id="topic-1",
        created_at=created_at or NOW,
        completed=completed,
        completed_at=completed_at,
    )


@pytest.fixture
def classifier():
    """Classifier with the default 3/7 day thresholds."""
    return AgingClassifier()


class TestAges:
    """Test age helpers."""

    def test_age_counts_calendar_days(self):
        """Test a task from late yesterday is one day old just after midnight."""
        task = make_task(created_at=datetime(2024, 3, 9, 23, 59))
        assert age_in_days(task, datetime(2024, 3, 10, 0, 1)) == 1

    def test_age_of_future_task_is_negative(self):
        """Test a created_at in the future yields a negative age."""
        task = make_task(created_at=NOW + timedelta(days=2))
        assert age_in_days(task, NOW) == -2

    def test_completed_age(self):
        """Test completion age is measured from completed_at."""
        task = make_task(
            created_at=NOW - timedelta(days=20),
            completed=True,
            completed_at=NOW - timedelta(days=4),
        )
        assert completed_age_in_days(task, NOW) == 4

    def test_completed_age_without_timestamp(self):
        """Test completion age is None when completed_at is missing."""
        assert completed_age_in_days(make_task(completed=True), NOW) is None

    @pytest.mark.parametrize(
        "days,label",
        [(0, "Today"), (1, "1 day ago"), (2, "2 days ago"), (30, "30 days ago")],
    )
    def test_format_age(self, days, label):
        """Test age labels."""
        assert format_age(days) == label


class TestStaleness:
    """Test the stale threshold for open tasks."""

    def test_three_days_is_stale(self, classifier):
        """Test an open task created exactly three days ago is stale."""
        task = make_task(created_at=NOW - timedelta(days=3))
        assert classifier.is_stale(task, NOW)
        assert classifier.aging_state(task, NOW) == AgingState.STALE

    def test_just_under_three_days_is_fresh(self, classifier):
        """Test an open task created 2 days 23 hours ago is fresh."""
        task = make_task(created_at=NOW - timedelta(days=2, hours=23))
        assert not classifier.is_stale(task, NOW)
        assert classifier.aging_state(task, NOW) == AgingState.FRESH

    def test_completed_task_is_never_stale(self, classifier):
        """Test completion exempts a task from staleness."""
        task = make_task(
            created_at=NOW - timedelta(days=30),
            completed=True,
            completed_at=NOW,
        )
        assert not classifier.is_stale(task, NOW)

    def test_classify_pending(self, classifier):
        """Test pending classification splits on the threshold."""
        fresh = make_task("fresh", created_at=NOW - timedelta(days=1))
        stale = make_task("stale", created_at=NOW - timedelta(days=5))
        done = make_task(
            "done", created_at=NOW - timedelta(days=9), completed=True, completed_at=NOW
        )

        buckets = classifier.classify_pending([fresh, stale, done], NOW)

        assert [t.id for t in buckets.stale] == ["stale"]
        # Completed tasks are not stale, so they fall into fresh
        assert [t.id for t in buckets.fresh] == ["fresh", "done"]

    def test_custom_threshold(self):
        """Test the stale threshold is configurable."""
        classifier = AgingClassifier(stale_days=1)
        task = make_task(created_at=NOW - timedelta(days=1))
        assert classifier.is_stale(task, NOW)


class TestCompletedAging:
    """Test the done threshold for completed tasks."""

    def test_seven_days_is_old(self, classifier):
        """Test a task completed seven days ago is old."""
        task = make_task(
            created_at=NOW - timedelta(days=10),
            completed=True,
            completed_at=NOW - timedelta(days=7),
        )
        assert classifier.is_old_completed(task, NOW)
        assert classifier.aging_state(task, NOW) == AgingState.COMPLETED_OLD

    def test_six_days_is_recent(self, classifier):
        """Test a task completed six days ago is recent."""
        task = make_task(
            created_at=NOW - timedelta(days=10),
            completed=True,
            completed_at=NOW - timedelta(days=6),
        )
        assert not classifier.is_old_completed(task, NOW)
        assert classifier.aging_state(task, NOW) == AgingState.COMPLETED_RECENT

    def test_missing_completed_at_is_recent(self, classifier):
        """Test a completed task without completed_at counts as recent."""
        task = make_task(created_at=NOW - timedelta(days=30), completed=True)

        buckets = classifier.classify_completed([task], NOW)

        assert buckets.recent == [task]
        assert buckets.old == []

    def test_classify_completed_skips_open_tasks(self, classifier):
        """Test open tasks are left out of completed classification."""
        open_task = make_task("open", created_at=NOW - timedelta(days=30))
        old = make_task(
            "old", created_at=NOW - timedelta(days=30), completed=True,
            completed_at=NOW - timedelta(days=8),
        )

        buckets = classifier.classify_completed([open_task, old], NOW)

        assert [t.id for t in buckets.old] == ["old"]
        assert buckets.recent == []


class TestClassify:
    """Test full classification."""

    def test_every_task_in_exactly_one_bucket(self, classifier):
        """Test the four buckets partition the input."""
        tasks = [
            make_task("fresh", created_at=NOW),
            make_task("stale", created_at=NOW - timedelta(days=4)),
            make_task(
                "recent", created_at=NOW - timedelta(days=4), completed=True,
                completed_at=NOW - timedelta(days=1),
            ),
            make_task(
                "old", created_at=NOW - timedelta(days=40), completed=True,
                completed_at=NOW - timedelta(days=10),
            ),
            make_task("future", created_at=NOW + timedelta(days=1)),
        ]

        report = classifier.classify(tasks, NOW)
        bucketed = [t.id for t in report.fresh + report.stale + report.recent + report.old]

        assert len(report) == len(tasks)
        assert sorted(bucketed) == sorted(t.id for t in tasks)
        assert [t.id for t in report.fresh] == ["fresh", "future"]
        assert [t.id for t in report.stale] == ["stale"]
        assert [t.id for t in report.recent] == ["recent"]
        assert [t.id for t in report.old] == ["old"]

    def test_inputs_are_not_modified(self, classifier):
        """Test classification leaves tasks untouched."""
        tasks = [
            make_task("a", created_at=NOW - timedelta(days=5)),
            make_task("b", completed=True, completed_at=NOW - timedelta(days=9)),
        ]
        before = [t.model_dump() for t in tasks]

        classifier.classify(tasks, NOW)
        classifier.classify_pending(tasks, NOW)
        classifier.classify_completed(tasks, NOW)

        assert [t.model_dump() for t in tasks] == before
