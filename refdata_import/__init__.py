"""refdata-import: CSV ingestion for the assembly, product and test-document reference tables.

Typical use::

    from refdata_import import InMemoryStore, import_csv

    store = InMemoryStore()
    result = import_csv("Assembly", csv_text, store)
    print(result.to_dict())
"""

from refdata_import.db.store import InMemoryStore, PostgresStore
from refdata_import.models.entities import TargetEntity
from refdata_import.models.import_result import ImportFailure, ImportResult, ImportWarning
from refdata_import.services.orchestrator import import_csv

__version__ = "0.1.0"

__all__ = [
    "ImportFailure",
    "ImportResult",
    "ImportWarning",
    "InMemoryStore",
    "PostgresStore",
    "TargetEntity",
    "import_csv",
]
