"""Engine components orchestrating listing → gate → detail → image → publish."""

from .dedup import DeduplicationGate, GateDecision
from .detail import DetailEnricher
from .fetcher import FetchRequest, FetchResponse, Fetcher
from .images import ImagePipeline
from .listing import ListingExtractor
from .outcome import Outcome, OutcomeStatus
from .pacing import RequestPacer
from .parser import Parser
from .records import (
    DetailedContent,
    ListingCandidate,
    PublishedRecord,
    StoredImage,
    assemble_record,
    carry_forward,
    sort_records,
)

__all__ = [
    "DeduplicationGate",
    "DetailEnricher",
    "DetailedContent",
    "FetchRequest",
    "FetchResponse",
    "Fetcher",
    "GateDecision",
    "ImagePipeline",
    "ListingCandidate",
    "ListingExtractor",
    "Outcome",
    "OutcomeStatus",
    "Parser",
    "PublishedRecord",
    "RequestPacer",
    "StoredImage",
    "assemble_record",
    "carry_forward",
    "sort_records",
]
