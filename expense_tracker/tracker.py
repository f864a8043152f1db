"""
Expense Tracker Orchestrator

Ties the record store, the persistence reconciler, the aggregator, the
codec and the activity logger together. The UI layer holds one
ExpenseTracker and calls into it for every action.

Every mutating method:
1. Applies the change to the in-memory store (or rejects it untouched)
2. Awaits the full write-through to all backends
3. Logs the outcome and notifies the user
and only then returns. Storage failures are logged, never raised;
validation, lookup and format failures are notified and re-raised.
"""

from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, Field

from expense_tracker.activity import ActivityLogger, Notifier, configure_logging
from expense_tracker.codec import (
    CSV_HEADERS,
    CSV_MEDIA_TYPE,
    JSON_MEDIA_TYPE,
    FormatError,
    backup_filename,
    csv_filename,
    dumps_document,
    from_json,
    to_csv,
    to_json,
)
from expense_tracker.config import AppSettings, StorageSettings, get_settings
from expense_tracker.models.activity import ActivityEventType
from expense_tracker.models.expense import (
    ExpenseDraft,
    ExpenseFilter,
    ExpenseRecord,
    TrackerState,
)
from expense_tracker.persistence import PersistenceReconciler
from expense_tracker.reports import (
    MONTH_NAMES,
    BudgetSummary,
    ChartSeries,
    DashboardSummary,
    budget_summary,
    by_category,
    by_month,
    chart_series,
    dashboard_summary,
)
from expense_tracker.services.storage import (
    InMemoryKeyValueStore,
    JSONFileKeyValueStore,
    KeyValueStateBackend,
    SnapshotBackend,
    SQLiteRecordBackend,
)
from expense_tracker.store import NotFoundError, RecordStore, ValidationError


DraftInput = Union[ExpenseDraft, Mapping[str, Any]]


def _local_now() -> datetime:
    # Day, week and month windows follow the user's wall clock
    return datetime.now().astimezone()


class ExportFile(BaseModel):
    """A file ready to be handed to the download collaborator."""

    filename: str = Field(..., description="Suggested file name")
    content: str = Field(..., description="UTF-8 text content")
    media_type: str = Field(..., description="MIME type")


class ExpenseTracker:
    """
    The one object the UI talks to.
    """

    def __init__(
        self,
        store: RecordStore,
        reconciler: PersistenceReconciler,
        activity: Optional[ActivityLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the tracker.

        Args:
            store: In-memory record store (owned by this tracker)
            reconciler: Write-through and load reconciliation
            activity: Logging and notification; local logging only if None
            clock: Source of "now" for dashboards and exports
        """
        self._store = store
        self._reconciler = reconciler
        self._activity = activity or ActivityLogger()
        self._clock = clock or _local_now

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def locale(self) -> str:
        return self._activity.locale

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> TrackerState:
        """Populate the store from the reconciled backends."""
        state = await self._reconciler.load()
        self._store.replace_state(state)
        await self._activity.note(
            ActivityEventType.DATA_LOADED,
            records=len(state.records),
            budget=state.budget,
        )
        return state

    async def _persist(self) -> dict[str, bool]:
        return await self._reconciler.persist(self._store.snapshot())

    # -------------------------------------------------------------------------
    # Record changes
    # -------------------------------------------------------------------------

    async def add_expense(self, draft: DraftInput) -> ExpenseRecord:
        """
        Record a new expense.

        Raises:
            ValidationError: If the draft is incomplete or the amount invalid
        """
        try:
            record = self._store.add(draft)
        except ValidationError as e:
            await self._activity.rejected(_draft_event(e), e)
            raise

        await self._persist()
        await self._activity.success(
            ActivityEventType.EXPENSE_ADDED,
            expense_id=record.id,
            category=record.category,
            amount=record.amount,
        )
        return record

    async def update_expense(self, expense_id: int, draft: DraftInput) -> ExpenseRecord:
        """
        Replace an expense, keeping its id.

        Raises:
            ValidationError: If the draft is incomplete or the amount invalid
            NotFoundError: If no expense has this id
        """
        try:
            record = self._store.update(expense_id, draft)
        except ValidationError as e:
            await self._activity.rejected(_draft_event(e), e, expense_id=expense_id)
            raise
        except NotFoundError as e:
            await self._activity.rejected(
                ActivityEventType.EXPENSE_NOT_FOUND, e, expense_id=expense_id
            )
            raise

        await self._persist()
        await self._activity.success(
            ActivityEventType.EXPENSE_UPDATED,
            expense_id=record.id,
            amount=record.amount,
        )
        return record

    async def delete_expense(self, expense_id: int) -> bool:
        """
        Delete an expense.

        Deleting an unknown id changes nothing and is not persisted, but the
        user still gets the usual confirmation: the expense is gone either way.

        Returns True if an expense was removed.
        """
        if not self._store.remove(expense_id):
            await self._activity.success(
                ActivityEventType.EXPENSE_DELETED,
                expense_id=expense_id,
                removed=False,
            )
            return False

        await self._persist()
        await self._activity.success(ActivityEventType.EXPENSE_DELETED, expense_id=expense_id)
        return True

    async def set_budget(self, amount: Any) -> float:
        """
        Overwrite the monthly budget.

        Raises:
            ValidationError: If amount is missing or not a positive number
        """
        try:
            budget = self._store.set_budget(amount)
        except ValidationError as e:
            await self._activity.rejected(ActivityEventType.INVALID_BUDGET, e)
            raise

        await self._persist()
        await self._activity.success(ActivityEventType.BUDGET_SET, budget=budget)
        return budget

    # -------------------------------------------------------------------------
    # Bulk data operations
    # -------------------------------------------------------------------------

    async def clear_all(self) -> None:
        """Delete every expense and the budget, in memory and in storage."""
        removed = len(self._store)
        self._store.clear()
        results = await self._reconciler.clear()
        await self._activity.success(
            ActivityEventType.DATA_CLEARED,
            records_removed=removed,
            backends=results,
        )

    async def import_data(self, document: Union[str, bytes, Mapping[str, Any]]) -> TrackerState:
        """
        Replace all expenses with those of an export document.

        A document without a usable budget keeps the current budget.

        Raises:
            FormatError: If the document is malformed
        """
        try:
            state = from_json(document, current_budget=self._store.budget)
        except FormatError as e:
            await self._activity.rejected(ActivityEventType.IMPORT_FAILED, e)
            raise

        self._store.replace_state(state)
        await self._persist()
        await self._activity.success(
            ActivityEventType.DATA_IMPORTED,
            records=len(state.records),
            budget=state.budget,
        )
        return state

    async def restore_backup(self) -> bool:
        """
        Replace the state with the stored snapshot and write it everywhere.

        Returns False (and changes nothing) when there is no readable snapshot.
        """
        snapshot = await self._reconciler.restore_from_snapshot()
        if snapshot is None:
            await self._activity.warning(ActivityEventType.BACKUP_MISSING)
            return False

        state = TrackerState(
            records=snapshot.records or [],
            budget=self._store.budget if snapshot.budget is None else snapshot.budget,
        )
        self._store.replace_state(state)
        await self._persist()
        await self._activity.success(
            ActivityEventType.BACKUP_RESTORED,
            records=len(state.records),
            budget=state.budget,
        )
        return True

    async def export_json(self) -> ExportFile:
        """Full backup document (records, budget, timestamp, version)."""
        now = self._clock()
        document = to_json(self._store.snapshot(), now=now)
        export = ExportFile(
            filename=backup_filename(now.date()),
            content=dumps_document(document),
            media_type=JSON_MEDIA_TYPE,
        )
        await self._activity.success(
            ActivityEventType.DATA_EXPORTED,
            filename=export.filename,
            records=len(document["expenses"]),
        )
        return export

    async def export_csv(self) -> ExportFile:
        """
        Flat CSV of every expense, headers in the tracker's language.

        Raises:
            ValidationError: If there are no expenses to export
        """
        records = self._store.records
        if not records:
            error = ValidationError("No expenses to export")
            await self._activity.rejected(ActivityEventType.NOTHING_TO_EXPORT, error)
            raise error

        headers = CSV_HEADERS.get(self.locale, CSV_HEADERS["en"])
        export = ExportFile(
            filename=csv_filename(self._clock().date()),
            content=to_csv(records, headers=headers),
            media_type=CSV_MEDIA_TYPE,
        )
        await self._activity.success(
            ActivityEventType.CSV_EXPORTED,
            filename=export.filename,
            records=len(records),
        )
        return export

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    def list_expenses(
        self,
        filter: Optional[Union[ExpenseFilter, Mapping[str, Any]]] = None,
    ) -> list[ExpenseRecord]:
        """Filtered expenses, newest first."""
        return self._store.query(filter)

    def dashboard(self, now: Optional[Union[date, datetime]] = None) -> DashboardSummary:
        return dashboard_summary(
            self._store.records,
            self._store.budget,
            now or self._clock(),
        )

    def budget_summary(self, now: Optional[Union[date, datetime]] = None) -> BudgetSummary:
        return budget_summary(
            self._store.records,
            self._store.budget,
            now or self._clock(),
        )

    def category_summary(self) -> dict[str, float]:
        """Totals per category, largest first."""
        return by_category(self._store.records)

    def monthly_comparison(self, year: Optional[int] = None) -> dict[str, float]:
        """Totals per month of `year` (default: the current year), in calendar order."""
        return by_month(
            self._store.records,
            year or self._clock().year,
            month_names=MONTH_NAMES.get(self.locale, MONTH_NAMES["en"]),
        )

    def category_chart(self) -> ChartSeries:
        return chart_series(self.category_summary())

    def monthly_chart(self, year: Optional[int] = None) -> ChartSeries:
        return chart_series(self.monthly_comparison(year))


def _draft_event(error: ValidationError) -> ActivityEventType:
    if "amount" in error.fields and not error.missing:
        return ActivityEventType.INVALID_AMOUNT
    return ActivityEventType.MISSING_FIELDS


def create_tracker(
    storage_settings: Optional[StorageSettings] = None,
    app_settings: Optional[AppSettings] = None,
    notifier: Optional[Notifier] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> ExpenseTracker:
    """
    Factory function to create a tracker with the default backend stack.

    Args:
        storage_settings: Storage locations; defaults to get_settings().storage
        app_settings: Locale and logging; defaults to get_settings().app
        notifier: Receives (message, severity) for user-facing events
        clock: Source of "now"; defaults to the current local time

    Returns:
        An ExpenseTracker that has not loaded yet; await start() before use
    """
    storage = storage_settings or get_settings().storage
    app = app_settings or get_settings().app
    configure_logging(app.log_level, app.log_json)

    primary_store = JSONFileKeyValueStore(
        storage.primary_path,
        retry_attempts=storage.write_retry_attempts,
        name="primary",
    )
    session_store = InMemoryKeyValueStore()

    ranked = [
        KeyValueStateBackend(
            primary_store,
            name="primary",
            expenses_key=storage.expenses_key,
            budget_key=storage.budget_key,
        ),
        KeyValueStateBackend(
            session_store,
            name="fallback",
            expenses_key=storage.expenses_key,
            budget_key=storage.budget_key,
        ),
    ]
    structured = None
    if storage.structured_enabled:
        structured = SQLiteRecordBackend(
            storage.structured_path,
            budget_key=storage.budget_sentinel_key,
            retry_attempts=storage.write_retry_attempts,
        )
    snapshot = SnapshotBackend(primary_store, key=storage.snapshot_key, clock=clock)

    return ExpenseTracker(
        store=RecordStore(),
        reconciler=PersistenceReconciler(ranked, structured=structured, snapshot=snapshot),
        activity=ActivityLogger(notifier, locale=app.locale),
        clock=clock,
    )
