"""User-facing notification texts, per locale."""

from expense_tracker.models.activity import ActivityEventType


MESSAGES: dict[str, dict[ActivityEventType, str]] = {
    "gu": {
        ActivityEventType.EXPENSE_ADDED: "ખર્ચ સફળતાપૂર્વક ઉમેરાયો!",
        ActivityEventType.EXPENSE_UPDATED: "ખર્ચ સફળતાપૂર્વક અપડેટ થયો!",
        ActivityEventType.EXPENSE_DELETED: "ખર્ચ કાઢી નાખાયો!",
        ActivityEventType.BUDGET_SET: "બજેટ સફળતાપૂર્વક સેટ થયો!",
        ActivityEventType.DATA_LOADED: "ડેટા લોડ થયો",
        ActivityEventType.DATA_IMPORTED: "ડેટા સફળતાપૂર્વક ઇમ્પોર્ટ થયો!",
        ActivityEventType.DATA_EXPORTED: "ડેટા સફળતાપૂર્વક એક્સપોર્ટ થયો!",
        ActivityEventType.CSV_EXPORTED: "CSV ફાઇલ સફળતાપૂર્વક ડાઉનલોડ થઈ!",
        ActivityEventType.DATA_CLEARED: "બધો ડેટા કાઢી નાખાયો!",
        ActivityEventType.BACKUP_RESTORED: "બેકઅપથી ડેટા લોડ થયો!",
        ActivityEventType.MISSING_FIELDS: "કૃપા કરીને બધા જરૂરી ફીલ્ડ્સ ભરો!",
        ActivityEventType.INVALID_AMOUNT: "કૃપા કરીને માન્ય રકમ દાખલ કરો!",
        ActivityEventType.INVALID_BUDGET: "કૃપા કરીને માન્ય બજેટ દાખલ કરો!",
        ActivityEventType.EXPENSE_NOT_FOUND: "ખર્ચ મળ્યો નથી!",
        ActivityEventType.IMPORT_FAILED: "ફાઇલ ફોર્મેટ ખોટો છે!",
        ActivityEventType.NOTHING_TO_EXPORT: "કોઈ ખર્ચ નથી એક્સપોર્ટ કરવા માટે!",
        ActivityEventType.BACKUP_MISSING: "કોઈ બેકઅપ મળ્યો નથી!",
    },
    "en": {
        ActivityEventType.EXPENSE_ADDED: "Expense added successfully!",
        ActivityEventType.EXPENSE_UPDATED: "Expense updated successfully!",
        ActivityEventType.EXPENSE_DELETED: "Expense deleted!",
        ActivityEventType.BUDGET_SET: "Budget set successfully!",
        ActivityEventType.DATA_LOADED: "Data loaded",
        ActivityEventType.DATA_IMPORTED: "Data imported successfully!",
        ActivityEventType.DATA_EXPORTED: "Data exported successfully!",
        ActivityEventType.CSV_EXPORTED: "CSV file downloaded successfully!",
        ActivityEventType.DATA_CLEARED: "All data deleted!",
        ActivityEventType.BACKUP_RESTORED: "Data restored from backup!",
        ActivityEventType.MISSING_FIELDS: "Please fill in all required fields!",
        ActivityEventType.INVALID_AMOUNT: "Please enter a valid amount!",
        ActivityEventType.INVALID_BUDGET: "Please enter a valid budget!",
        ActivityEventType.EXPENSE_NOT_FOUND: "Expense not found!",
        ActivityEventType.IMPORT_FAILED: "The file format is invalid!",
        ActivityEventType.NOTHING_TO_EXPORT: "There are no expenses to export!",
        ActivityEventType.BACKUP_MISSING: "No backup found!",
    },
}


def message_for(event_type: ActivityEventType, locale: str = "gu") -> str:
    """Localized text for an event, falling back to English."""
    table = MESSAGES.get(locale, MESSAGES["en"])
    return table.get(event_type) or MESSAGES["en"][event_type]
