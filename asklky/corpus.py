"""Static knowledge base of labeled passages.

The corpus is built once at process start, either from the built-in
passages or from a YAML file, and handed to the retriever and prompt
augmenter. It is never mutated afterwards.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple

import structlog
import yaml

from asklky import config
from asklky.errors import CorpusError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Passage:
    """One labeled unit of source text."""

    topic: str
    text: str


class Corpus:
    """Ordered, immutable, non-empty collection of passages."""

    __slots__ = ("_passages",)

    def __init__(self, passages: Iterable[Passage]):
        """Initialize the corpus.

        Args:
            passages: Passages in their canonical order

        Raises:
            ValueError: If no passages are given
        """
        self._passages: Tuple[Passage, ...] = tuple(passages)
        if not self._passages:
            raise ValueError("Corpus must contain at least one passage")

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Corpus":
        """Build a corpus from mappings with 'topic' and 'text' keys."""
        return cls(Passage(topic=r["topic"], text=r["text"]) for r in records)

    @property
    def passages(self) -> Tuple[Passage, ...]:
        return self._passages

    @property
    def texts(self) -> List[str]:
        return [p.text for p in self._passages]

    def __iter__(self) -> Iterator[Passage]:
        return iter(self._passages)

    def __len__(self) -> int:
        return len(self._passages)

    def __getitem__(self, index: int) -> Passage:
        return self._passages[index]

    def __repr__(self) -> str:
        return f"Corpus({len(self._passages)} passages)"


DEFAULT_CORPUS = Corpus.from_records([
    {
        "topic": "geopolitics, Singapore's survival",
        "text": (
            "My life has been spent building Singapore. We are a small country in a "
            "dangerous world, and we must always be relevant to the big powers. We do "
            "not have natural resources, our only resource is our people. Therefore, "
            "we must be a thinking people, and we must have a strong defense force to "
            "protect our sovereignty. The world owes us nothing. We owe ourselves our "
            "own survival."
        ),
    },
    {
        "topic": "leadership, challenges",
        "text": (
            "Leadership is about making difficult decisions, often unpopular ones, for "
            "the long-term good of the country. A leader must be honest and "
            "incorruptible. He must be willing to tell the people the hard truths, "
            "even if it costs him popularity. Singapore's success was not by chance; "
            "it was a result of meticulous planning and a firm hand in implementation."
        ),
    },
    {
        "topic": "social policy, meritocracy",
        "text": (
            "Meritocracy is the cornerstone of our society. We reward individuals "
            "based on their abilities and hard work, not their race, religion, or "
            "background. This ensures that the best minds lead the country and that "
            "everyone has an equal opportunity to succeed. However, we must also "
            "ensure that no one is left behind, and that social mobility remains a "
            "reality for all our citizens."
        ),
    },
    {
        "topic": "economy, future",
        "text": (
            "To thrive in the global economy, Singapore must be agile and open. We "
            "must continuously attract foreign investment and remain a hub for trade, "
            "finance, and technology. We must innovate and adapt, or we will become "
            "irrelevant. The future belongs to those who are disciplined and can "
            "seize opportunities."
        ),
    },
])


def load_corpus(path: Path) -> Corpus:
    """Load a corpus from a YAML file.

    The file must hold a list of mappings, each with string 'topic' and
    'text' fields. List order becomes corpus order.

    Args:
        path: Path to the YAML file

    Returns:
        The loaded Corpus

    Raises:
        CorpusError: If the file is missing, unreadable, not valid YAML, or has the wrong shape
    """
    if not path.is_file():
        raise CorpusError(f"Corpus file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("corpus_read_error", path=str(path), error=str(e))
        raise CorpusError(f"Could not read corpus file {path}: {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        logger.error("corpus_parse_error", path=str(path), error=str(e))
        raise CorpusError(f"Invalid corpus file {path}: {e}") from e

    if not isinstance(data, list) or not data:
        raise CorpusError(f"Corpus file {path} must contain a non-empty list")

    passages = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise CorpusError(f"Corpus entry {i} in {path} is not a mapping")
        topic, text = entry.get("topic"), entry.get("text")
        if not isinstance(topic, str) or not isinstance(text, str):
            raise CorpusError(
                f"Corpus entry {i} in {path} needs string 'topic' and 'text'"
            )
        passages.append(Passage(topic=topic, text=text))

    corpus = Corpus(passages)
    logger.info("corpus_loaded", path=str(path), passage_count=len(corpus))
    return corpus


def get_corpus(path: Optional[Path] = None) -> Corpus:
    """Return the corpus for this process.

    Args:
        path: YAML file to load (defaults to config.CORPUS_PATH)

    Returns:
        The file-backed corpus if a path is configured, else DEFAULT_CORPUS
    """
    path = path or config.CORPUS_PATH
    if path is None:
        logger.info("corpus_builtin", passage_count=len(DEFAULT_CORPUS))
        return DEFAULT_CORPUS
    return load_corpus(path)
