from .batch_dispatcher import BatchDispatcher
from .best_match import select_best_matches
from .call_limiter import CallLimiter
from .document_extractor import DocumentExtractor
from .document_service import DocumentService
from .extraction_cache import ExtractionCache
from .filter_evaluator import FilterEvaluator
from .intent_classifier import IntentClassifier
from .search_pipeline import SearchPipeline
from .vector_fallback import VectorFallbackSearcher

__all__ = [
    "BatchDispatcher",
    "CallLimiter",
    "DocumentExtractor",
    "DocumentService",
    "ExtractionCache",
    "FilterEvaluator",
    "IntentClassifier",
    "SearchPipeline",
    "VectorFallbackSearcher",
    "select_best_matches",
]
