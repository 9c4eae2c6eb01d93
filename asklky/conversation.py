"""Conversation controller for Ask LKY.

Drives one turn at a time through retrieval, prompt augmentation and
generation, keeps the in-memory turn history, and exposes the
idle/pending/errored state the presentation layer renders.
"""
import asyncio
import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import structlog

from asklky.corpus import Corpus
from asklky.errors import GenerationError
from asklky.rag.prompt import PromptAugmenter
from asklky.rag.retriever import Retriever

logger = structlog.get_logger()

ERROR_MESSAGE = "An error occurred. Please try again."


class Role(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TurnState(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    ERRORED = "errored"


@dataclass(frozen=True)
class Turn:
    """One message in the conversation."""

    role: Role
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "text": self.text}


@dataclass(frozen=True)
class ConversationSnapshot:
    """Everything the presentation layer may observe after a transition."""

    state: TurnState
    history: Tuple[Turn, ...]
    error: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "history": [turn.to_dict() for turn in self.history],
            "error": self.error,
        }


class TextGenerator(Protocol):
    """Anything that turns a prompt into reply text."""

    async def generate(self, prompt: str) -> str: ...


Listener = Callable[[ConversationSnapshot], None]


class ConversationController:
    """Single-session turn state machine.

    At most one turn is in flight. The pending guard is checked and set
    before the first await, so overlapping submissions from other tasks
    are rejected rather than queued.
    """

    def __init__(
        self,
        corpus: Corpus,
        generator: TextGenerator,
        retriever: Optional[Retriever] = None,
        augmenter: Optional[PromptAugmenter] = None,
    ):
        """Initialize the controller.

        Args:
            corpus: Knowledge base used for retrieval and fallback context
            generator: Generation client
            retriever: Custom retriever (defaults to one bound to corpus)
            augmenter: Custom prompt augmenter (defaults to one bound to corpus)
        """
        self.corpus = corpus
        self.generator = generator
        self.retriever = retriever or Retriever(corpus)
        self.augmenter = augmenter or PromptAugmenter(corpus)

        self._history: List[Turn] = []
        self._state = TurnState.IDLE
        self._error: Optional[str] = None
        self._listeners: List[Listener] = []
        self.query = ""

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def history(self) -> Tuple[Turn, ...]:
        return tuple(self._history)

    @property
    def error(self) -> Optional[str]:
        return self._error

    def snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(
            state=self._state, history=self.history, error=self._error
        )

    def subscribe(self, listener: Listener) -> None:
        """Register a callback invoked with a snapshot after each transition."""
        self._listeners.append(listener)

    def update_query(self, text: str) -> None:
        """Replace the pending input text."""
        self.query = text

    def _transition(self, state: TurnState) -> None:
        previous, self._state = self._state, state
        logger.debug("turn_state_changed", previous=previous.value, state=state.value)
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)

    async def submit_query(self, text: Optional[str] = None) -> bool:
        """Run one conversational turn.

        Blank text and submissions made while a turn is pending are
        ignored. Generation failures leave the user turn in history, record
        a generic error message and move to ERRORED; they are not raised.
        A cancelled turn also settles in ERRORED before the cancellation
        propagates, so the controller never stays PENDING.

        Args:
            text: Query to submit (defaults to the current input text)

        Returns:
            True if the submission was accepted, False if it was ignored
        """
        query = self.query if text is None else text

        if not query or not query.strip():
            logger.debug("empty_query_ignored")
            return False

        if self._state is TurnState.PENDING:
            logger.warning("submission_rejected_turn_pending", query_length=len(query))
            return False

        self.query = query
        self._error = None
        self._history.append(Turn(Role.USER, query))

        try:
            self._transition(TurnState.PENDING)

            logger.info(
                "turn_started",
                turn_index=len(self._history),
                query_length=len(query),
                query_preview=query[:100],
            )

            passages = self.retriever.select(query)
            prompt = self.augmenter.build(query, passages)
            reply = await self.generator.generate(prompt)

        except GenerationError as e:
            logger.error(
                "turn_failed",
                error=e.detail,
                error_type=type(e).__name__,
                status_code=e.status_code,
            )
            self._error = ERROR_MESSAGE
            self._transition(TurnState.ERRORED)

        except asyncio.CancelledError:
            logger.warning("turn_cancelled", turn_index=len(self._history))
            self._error = ERROR_MESSAGE
            self._transition(TurnState.ERRORED)
            raise

        except Exception as e:
            logger.error(
                "turn_failed_unexpectedly",
                error=str(e),
                error_type=type(e).__name__,
            )
            self._error = ERROR_MESSAGE
            self._transition(TurnState.ERRORED)
            raise

        else:
            self._history.append(Turn(Role.ASSISTANT, reply))
            logger.info("turn_completed", response_length=len(reply))
            self._transition(TurnState.IDLE)

        finally:
            self.query = ""

        return True
