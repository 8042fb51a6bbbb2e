from review_moderation.db.repository import AsyncSQLStore, SQLStore, SyncSQLStore
from review_moderation.db.store import ActionStatistics, Store

__all__ = ["ActionStatistics", "AsyncSQLStore", "SQLStore", "Store", "SyncSQLStore"]
