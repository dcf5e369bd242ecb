"""Read models for the dashboard and scopes views."""

from typing import Any

from app.core.schemas_knowledge import DashboardResponse, EntrySummary, ScopeSummary
from app.db.knowledge import KnowledgeStore

RECENT_ENTRIES = 5


def _entry_summary(row: dict[str, Any], scope: dict[str, Any] | None = None) -> EntrySummary:
    scope = scope if scope is not None else (row.get("knowledge_scopes") or {})
    return EntrySummary(
        id=str(row["id"]),
        title=row.get("title") or "Untitled",
        created_at=row.get("created_at"),
        scope_name=scope.get("name"),
        scope_color=scope.get("color"),
    )


def build_dashboard(store: KnowledgeStore, user_id: str) -> DashboardResponse:
    recent = store.list_recent_entries(user_id, RECENT_ENTRIES)
    return DashboardResponse(
        total_scopes=store.count_scopes(user_id),
        total_entries=store.count_entries(user_id),
        recent_entries=[_entry_summary(row) for row in recent],
    )


def build_scope_summaries(store: KnowledgeStore, user_id: str) -> list[ScopeSummary]:
    summaries = []
    for scope in store.list_scopes_with_entries(user_id):
        entries = sorted(
            scope.get("knowledge_entries") or [],
            key=lambda e: e.get("created_at") or "",
            reverse=True,
        )
        summaries.append(
            ScopeSummary(
                id=str(scope["id"]),
                name=scope["name"],
                description=scope.get("description"),
                color=scope.get("color"),
                created_at=scope.get("created_at"),
                entry_count=len(entries),
                entries=[_entry_summary(entry, scope) for entry in entries],
            )
        )
    return summaries
