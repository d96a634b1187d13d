"""Best-match selection — prefer structured matches, keep each branch's own order."""

from docsearch.domain.entities import Document

DEFAULT_BEST_MATCH_LIMIT = 2


def select_best_matches(
    structured: list[Document],
    vector: list[Document],
    limit: int = DEFAULT_BEST_MATCH_LIMIT,
) -> list[Document]:
    """Pick structured matches when there are any, otherwise vector matches.

    Structured matches stay in listing order and vector matches in similarity
    order; neither branch is re-ranked, only truncated to ``limit``.
    """
    chosen = structured if structured else vector
    return list(chosen[:limit])
