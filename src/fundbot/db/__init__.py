from .repository import (  # noqa: F401
    Between,
    Contains,
    Exact,
    InMemoryRecordRepository,
    SqlRecordRepository,
    get_repository,
)
