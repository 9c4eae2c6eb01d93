"""Keyword retriever over the static corpus.

Selection is a case-insensitive substring test against each passage's
topic and text. There is no scoring: matches keep corpus order.
"""
from typing import List

import structlog

from asklky.corpus import Corpus, Passage

logger = structlog.get_logger()


def select(query: str, corpus: Corpus) -> List[Passage]:
    """Select passages whose topic or text contains the query.

    An empty query is a substring of everything and so selects the whole
    corpus. No match yields an empty list; falling back to the full corpus
    is left to the prompt augmenter.

    Args:
        query: Raw user query
        corpus: Corpus to search

    Returns:
        Matching passages in corpus order
    """
    needle = query.lower()
    return [
        passage
        for passage in corpus
        if needle in passage.topic.lower() or needle in passage.text.lower()
    ]


class Retriever:
    """Retriever bound to a single corpus."""

    def __init__(self, corpus: Corpus):
        self.corpus = corpus

    def select(self, query: str) -> List[Passage]:
        passages = select(query, self.corpus)
        logger.info(
            "retrieval_completed",
            query_length=len(query),
            results_returned=len(passages),
            topics=[p.topic for p in passages],
        )
        return passages
