"""
Synchronization primitives shared by every client store.

- merge: keyed reconciliation of snapshots into local collections
- optimistic: local-first mutations with rollback
- scheduler: per-consumer poll timers with skip-if-busy
- observable / notices: change and outcome notification
"""
from .merge import reconcile, replace_where, remove_where
from .notices import Notice, NoticeBoard, NoticeSeverity, failure_notice, success_notice
from .observable import ObservableStore
from .optimistic import MutationOutcome, OptimisticMutator, describe_failure
from .scheduler import PollHandle, PollingScheduler

__all__ = [
    'reconcile',
    'replace_where',
    'remove_where',
    'Notice',
    'NoticeBoard',
    'NoticeSeverity',
    'failure_notice',
    'success_notice',
    'ObservableStore',
    'MutationOutcome',
    'OptimisticMutator',
    'describe_failure',
    'PollHandle',
    'PollingScheduler',
]
