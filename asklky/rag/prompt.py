"""Persona prompt assembly.

The template is a fixed constant: persona directive, grounding and
anti-fabrication instructions, then the question and the context block.
"""
from typing import Sequence

import structlog

from asklky.corpus import Corpus, Passage

logger = structlog.get_logger()

CONTEXT_SEPARATOR = "\n---\n"

PROMPT_TEMPLATE = """You are Lee Kuan Yew. Your persona is that of a statesman, leader, and realist.
Answer the following question in the style of Lee Kuan Yew, using the provided context below as your primary source of information.
Be firm, direct, and pragmatic in your response.
If the context does not contain enough information to answer the question, state that you do not have the information but offer a related insight from the provided text. Do not make up facts.

Question: {question}

Context:
{context}
"""


def build_context(passages: Sequence[Passage], corpus: Corpus) -> str:
    """Join passage texts into the context block.

    Args:
        passages: Retrieved passages; when empty the whole corpus is used
        corpus: Corpus to fall back to

    Returns:
        Texts joined by a line of three hyphens, in order
    """
    source = passages if passages else corpus
    return CONTEXT_SEPARATOR.join(p.text for p in source)


def build(query: str, passages: Sequence[Passage], corpus: Corpus) -> str:
    """Compose the augmented prompt for a query.

    Args:
        query: Literal user question
        passages: Passages returned by the retriever, possibly empty
        corpus: Full corpus, used when nothing was retrieved

    Returns:
        The prompt text to send to the generation service
    """
    return PROMPT_TEMPLATE.format(
        question=query, context=build_context(passages, corpus)
    )


class PromptAugmenter:
    """Prompt builder bound to a single corpus."""

    def __init__(self, corpus: Corpus):
        self.corpus = corpus

    def build(self, query: str, passages: Sequence[Passage]) -> str:
        prompt = build(query, passages, self.corpus)
        logger.debug(
            "prompt_built",
            used_fallback=not passages,
            context_passages=len(passages) or len(self.corpus),
            prompt_length=len(prompt),
        )
        return prompt
