"""Components that inspect post content and talk to git."""

from .classifier import classify_state
from .extractor import PostMetadata, extract_metadata
from .materializer import ExtractionError, WorkingCopyMaterializer, validate_post_id
from .timestamps import CommitTimestampResolver, TimestampResolutionError

__all__ = [
    "CommitTimestampResolver",
    "ExtractionError",
    "PostMetadata",
    "TimestampResolutionError",
    "WorkingCopyMaterializer",
    "classify_state",
    "extract_metadata",
    "validate_post_id",
]
