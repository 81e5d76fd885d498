"""
Record models and persistence services.

- Pydantic models for job records and session cookies
- Record sink / side-channel store protocols and local implementations
- Optional Supabase record sink
"""

from jobcrawler.db.models import (
    NOT_SPECIFIED,
    HiringTeamMember,
    JobRecord,
    SessionCookie,
)
from jobcrawler.db.storage import (
    DatasetSink,
    FanOutRecordSink,
    KeyValueStore,
    MemoryKeyValueStore,
    MemoryRecordSink,
    RecordSink,
    SideChannelStore,
)
from jobcrawler.db.supabase_client import (
    SupabaseRecordSink,
    get_supabase,
)

__all__ = [
    # Models
    "NOT_SPECIFIED",
    "HiringTeamMember",
    "JobRecord",
    "SessionCookie",
    # Storage
    "DatasetSink",
    "FanOutRecordSink",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "MemoryRecordSink",
    "RecordSink",
    "SideChannelStore",
    # Supabase
    "SupabaseRecordSink",
    "get_supabase",
]
