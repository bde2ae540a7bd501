from tweet_index.services.importer.errors import (
    ConfigurationError,
    ParseError,
    SearchError,
    SubmissionError,
)
from tweet_index.services.importer.job_runner import run_import_job
from tweet_index.services.importer.orchestrator import run_import
from tweet_index.services.importer.types import (
    ElasticConnectionSettings,
    ImportedFile,
    ImportResult,
)

__all__ = [
    "ConfigurationError",
    "ElasticConnectionSettings",
    "ImportResult",
    "ImportedFile",
    "ParseError",
    "SearchError",
    "SubmissionError",
    "run_import",
    "run_import_job",
]
