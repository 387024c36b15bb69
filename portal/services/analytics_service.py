from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from portal.config import settings
from portal.models.enums import DocumentStatus
from portal.store.base import RecordStore
from portal.utils.timestamps import utcnow


@dataclass
class SubjectCount:
    subject: str
    count: int


@dataclass
class StudentCount:
    student_id: str
    student_name: str
    count: int


@dataclass
class StatusCount:
    status: DocumentStatus
    count: int


@dataclass
class Analytics:
    total_uploads: int
    subject_wise: list[SubjectCount]
    student_wise: list[StudentCount]
    status_wise: list[StatusCount]
    recent_uploads: int


def _by_count(counter: Counter) -> list[tuple[str, int]]:
    return sorted(counter.items(), key=lambda item: (-item[1], item[0]))


class AnalyticsAggregator:
    """Read-only summaries, recomputed from one store snapshot per call."""

    def __init__(self, store: RecordStore, window_days: int | None = None):
        self._store = store
        self._window = timedelta(days=window_days if window_days is not None else settings.recent_window_days)

    def compute(self, now: datetime | None = None) -> Analytics:
        """Summarise the store as of ``now``. A naive ``now`` is taken as local time."""
        now = now.astimezone(timezone.utc) if now else utcnow()
        docs = self._store.snapshot()

        subjects = Counter(d.subject for d in docs)
        students = Counter(d.uploaded_by.id for d in docs)
        # Latest name seen wins if an uploader's display name changed.
        names = {}
        for d in sorted(docs, key=lambda d: d.created_at):
            names[d.uploaded_by.id] = d.uploaded_by.name
        statuses = Counter(d.status for d in docs)

        cutoff = now - self._window
        recent = sum(1 for d in docs if cutoff <= d.created_at <= now)

        return Analytics(
            total_uploads=len(docs),
            subject_wise=[SubjectCount(subject=s, count=n) for s, n in _by_count(subjects)],
            student_wise=[
                StudentCount(student_id=sid, student_name=names[sid], count=n)
                for sid, n in _by_count(students)
            ],
            status_wise=[StatusCount(status=s, count=statuses.get(s, 0)) for s in DocumentStatus],
            recent_uploads=recent,
        )
