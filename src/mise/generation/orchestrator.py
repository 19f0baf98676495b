"""
Mise - Generation Orchestrator.

Drives one request through its lifecycle and owns the only RequestStatus:

    validating -> connecting -> streaming* -> completed
         \\             \\            \\
          error         error        error (-> retry countdown)

Guarantees:
- At most one attempt is in flight. A new generate() supersedes the
  previous attempt and any pending retry countdown.
- cancel() returns to idle; the cancelled attempt writes nothing, neither
  status nor persistence.
- The cancellation token is checked before each chunk, so at most one
  chunk is read after cancelling.
- An auto-retry replays the request captured when the attempt started.

Flavors (recipe, ideas) subclass this and supply prompts and completion
handling.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from mise.core.classifier import ErrorClassifier
from mise.core.errors import APIError
from mise.guardrails.validator import Guardrail, PromptGuardrail
from mise.llm.model_router import get_flavor_config
from mise.llm.registry import AdapterRegistry
from mise.models.entities import (
    ChatMessage,
    ChefProfile,
    MealType,
    ProteinType,
    Recipe,
    RecipeIdea,
)
from mise.models.status import (
    Completed,
    Connecting,
    Error,
    Idle,
    RequestStatus,
    Streaming,
    Validating,
    can_transition,
    is_active,
)
from mise.observability.session_logger import SessionLogger
from mise.storage.store import PersistenceStore

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")

StatusListener = Callable[[RequestStatus], None]

VALIDATING_MESSAGES = {
    "en": "Validating your request...",
    "es": "Validando tu petición...",
}


class CancellationToken:
    """Shared flag between an attempt and whoever may cancel it."""

    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class PendingRetry:
    """An armed auto-retry countdown."""

    code: str
    delay: float
    retry: int  # 1-based number of this automatic retry
    scheduled_at: float = field(default_factory=time.monotonic)

    @property
    def remaining(self) -> float:
        return max(0.0, self.delay - (time.monotonic() - self.scheduled_at))


@dataclass
class AttemptContext:
    """What a flavor needs once the guardrail and credential checks passed."""

    request: Any
    sanitized: str
    provider: str
    profile: ChefProfile
    pantry: list[str]


class GenerationOrchestrator(ABC, Generic[RequestT]):
    flavor: str = "recipe"
    exposes_content: bool = True  # Streaming status carries the text so far

    def __init__(
        self,
        *,
        store: PersistenceStore,
        registry: AdapterRegistry,
        provider: str,
        api_key: str | None = None,
        model: str | None = None,
        locale: str = "en",
        profile: ChefProfile | None = None,
        guardrail: Guardrail | None = None,
        classifier: ErrorClassifier | None = None,
        max_auto_retries: int = 3,
        session_logger: SessionLogger | None = None,
    ):
        self.store = store
        self.registry = registry
        self.provider = provider
        self.api_key = api_key
        self.model = model
        self.locale = locale
        self.profile = profile
        self.guardrail = guardrail or PromptGuardrail()
        self.classifier = classifier or ErrorClassifier()
        self.max_auto_retries = max_auto_retries
        self.session_logger = session_logger or SessionLogger(enabled=False)

        self._status: RequestStatus = Idle()
        self._content = ""
        self._token: CancellationToken | None = None
        self._last_request: RequestT | None = None
        self._retry_task: asyncio.Task | None = None
        self._pending_retry: PendingRetry | None = None
        self._listeners: list[StatusListener] = []

    # =========================================================================
    # Read accessors
    # =========================================================================

    @property
    def status(self) -> RequestStatus:
        return self._status

    @property
    def content(self) -> str:
        return self._content

    @property
    def is_generating(self) -> bool:
        return is_active(self._status)

    @property
    def pending_retry(self) -> PendingRetry | None:
        if self._retry_task is not None and self._retry_task.done():
            self._release_retry(self._retry_task)
        return self._pending_retry

    @property
    def last_request(self) -> RequestT | None:
        return self._last_request

    @property
    def chat_history(self) -> list[ChatMessage]:
        return self.store.get_chat_history()

    @property
    def recipe_history(self) -> list[Recipe]:
        return self.store.get_history()

    @property
    def ideas_history(self) -> list[RecipeIdea]:
        return self.store.get_recipe_ideas()

    def filter_ideas(
        self,
        *,
        meal_type: MealType | None = None,
        protein_type: ProteinType | None = None,
        is_used: bool | None = None,
        vibes: list[str] | None = None,
    ) -> list[RecipeIdea]:
        return self.store.filter_ideas(
            meal_type=meal_type, protein_type=protein_type, is_used=is_used, vibes=vibes
        )

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Call listener on every status change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Commands
    # =========================================================================

    async def generate(self, request: RequestT) -> RequestStatus:
        """Start a fresh attempt, superseding anything in flight."""
        self._cancel_pending_retry("superseded")
        self._abort_current()
        return await self._run_attempt(request, retries=0)

    async def retry_last(self) -> RequestStatus:
        """Manually reissue the last captured request."""
        if self._last_request is None:
            return self._status
        return await self.generate(self._last_request)

    def cancel(self) -> None:
        """Stop the in-flight attempt and any retry countdown; back to idle."""
        self._cancel_pending_retry("cancelled")
        self._abort_current()
        self._force_idle()

    def reset(self) -> None:
        self.cancel()
        self._content = ""
        self._last_request = None
        self._on_reset()

    def clear_history(self) -> None:
        self.store.clear_chat_history()

    async def settle(self) -> RequestStatus:
        """Wait out any armed retry countdowns (and the attempts they start)."""
        while self._retry_task is not None:
            task = self._retry_task
            await asyncio.wait({task})
            # A task cancelled before its first step never reaches its own cleanup
            self._release_retry(task)
        return self._status

    # =========================================================================
    # Flavor hooks
    # =========================================================================

    @abstractmethod
    def _prompt_text(self, request: RequestT) -> str:
        """The user-supplied text the guardrail validates."""

    @abstractmethod
    def _system_prompt(self, ctx: AttemptContext) -> str: ...

    @abstractmethod
    def _user_prompt(self, ctx: AttemptContext) -> str: ...

    @abstractmethod
    def _on_completed(self, ctx: AttemptContext, content: str, user_message: ChatMessage) -> None:
        """Post-process and persist a completed attempt. Must not raise."""

    def _on_attempt_start(self, request: RequestT) -> None:
        pass

    def _on_reset(self) -> None:
        pass

    # =========================================================================
    # Attempt
    # =========================================================================

    async def _run_attempt(self, request: RequestT, retries: int) -> RequestStatus:
        token = CancellationToken()
        self._token = token
        self._last_request = request
        self._content = ""

        self.session_logger.attempt_start(self.flavor, self.provider, self.model, retry=retries)
        self._set(token, Validating(message=VALIDATING_MESSAGES.get(self.locale, VALIDATING_MESSAGES["en"])))

        try:
            return await self._attempt(token, request, retries)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if token.cancelled:
                self.session_logger.attempt_end("cancelled")
                return self._status
            logger.exception(f"{self.flavor} attempt via {self.provider} failed outside the stream: {e}")
            self._fail(token, self.classifier.classify(e, provider=self.provider, attempt=retries))
            return self._status

    async def _attempt(self, token: CancellationToken, request: RequestT, retries: int) -> RequestStatus:
        self._on_attempt_start(request)
        started = time.monotonic()

        prompt_text = self._prompt_text(request)
        validation = self.guardrail.validate_input(prompt_text)
        if not validation.valid:
            logger.warning(f"Input rejected by guardrail: {validation.error}")
            self._fail(token, self.classifier.prompt_injection())
            return self._status
        sanitized = validation.sanitized_input or prompt_text

        api_key = self._resolve_api_key()
        if not api_key:
            self._fail(token, self.classifier.missing_api_key())
            return self._status

        adapter = self.registry.get_adapter(self.provider)
        if adapter is None:
            self._fail(token, self.classifier.provider_not_found(self.provider))
            return self._status

        self._set(token, Connecting(provider=adapter.name))

        ctx = AttemptContext(
            request=request,
            sanitized=sanitized,
            provider=self.provider,
            profile=self.profile or self.store.get_profile() or ChefProfile(),
            pantry=self.store.get_pantry(),
        )
        flavor_config = get_flavor_config(self.flavor, self.provider, model_override=self.model)

        chunks = 0
        stream = None
        try:
            stream = adapter.generate_recipe(
                self._system_prompt(ctx),
                self._user_prompt(ctx),
                api_key,
                model=flavor_config.get("model"),
                temperature=flavor_config.get("temperature"),
            )
            async for chunk in stream:
                if token.cancelled:
                    break
                if chunk.done:
                    self._content += chunk.content
                    break
                self._content += chunk.content
                chunks += 1
                self._set(
                    token,
                    Streaming(
                        tokens=len(self._content),
                        content=self._content if self.exposes_content else "",
                    ),
                )
        except asyncio.CancelledError:
            if token is self._token:
                self.cancel()
            self.session_logger.attempt_end("cancelled", chunks=chunks)
            raise
        except Exception as e:
            if token.cancelled:
                self.session_logger.attempt_end("cancelled", chunks=chunks)
                return self._status
            logger.error(f"{self.flavor} attempt via {self.provider} failed: {e}")
            error = self.classifier.classify(e, provider=self.provider, attempt=retries)
            self._fail(token, error, chunks=chunks)
            self._schedule_retry(request, error, retries)
            return self._status
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        if token.cancelled:
            self.session_logger.attempt_end("cancelled", chunks=chunks)
            return self._status

        content = self._content
        self._set(token, Completed(duration=time.monotonic() - started, content=content))
        self.session_logger.attempt_end("completed", chunks=chunks)
        self._finish(ctx, content)
        return self._status

    def _finish(self, ctx: AttemptContext, content: str) -> None:
        user_message = ChatMessage(role="user", content=ctx.sanitized)
        self.store.add_to_chat_history(user_message)
        self.store.add_to_chat_history(ChatMessage(role="assistant", content=content))
        self.session_logger.persisted("chat", 2)
        self.store.set_last_provider(self.provider)
        try:
            self._on_completed(ctx, content, user_message)
        except Exception as e:
            # Post-processing never turns a completed attempt into an error
            logger.exception(f"Post-processing of {self.flavor} output failed: {e}")

    def _resolve_api_key(self) -> str | None:
        if self.api_key:
            return self.api_key
        saved = self.store.get_api_key(self.provider)
        return saved.key if saved else None

    # =========================================================================
    # Status
    # =========================================================================

    def _set(self, token: CancellationToken, status: RequestStatus) -> bool:
        """Apply a status from an attempt. Writes from stale or cancelled attempts are dropped."""
        if token is not self._token or token.cancelled:
            return False
        old = self._status
        if not can_transition(old.state, status.state):
            logger.warning(f"Ignoring illegal status move {old.state} -> {status.state}")
            return False
        self._apply(status)
        return True

    def _force_idle(self) -> None:
        if self._status.state != "idle":
            self._apply(Idle())

    def _apply(self, status: RequestStatus) -> None:
        old = self._status
        self._status = status
        if old.state != status.state:
            self.session_logger.status_change(old.state, status.state)
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception as e:
                logger.error(f"Status listener failed: {e}")

    def _fail(self, token: CancellationToken, error: APIError, chunks: int = 0) -> None:
        if self._set(token, Error(error=error)):
            self.session_logger.attempt_end("error", chunks=chunks, error=error.code.value)

    def _abort_current(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None

    # =========================================================================
    # Auto-retry
    # =========================================================================

    def _schedule_retry(self, request: RequestT, error: APIError, retries: int) -> None:
        if not error.should_retry:
            return
        if self.max_auto_retries and retries >= self.max_auto_retries:
            logger.info(f"Auto-retry limit ({self.max_auto_retries}) reached for {error.code.value}")
            return

        delay = float(error.retry_delay or 0)
        self._pending_retry = PendingRetry(code=error.code.value, delay=delay, retry=retries + 1)
        self._retry_task = asyncio.create_task(self._retry_after(request, delay, retries + 1))
        self.session_logger.retry_scheduled(error.code.value, delay, retries + 1)
        logger.info(f"Retrying {self.flavor} in {delay:.1f}s ({error.code.value})")

    async def _retry_after(self, request: RequestT, delay: float, retries: int) -> None:
        try:
            await asyncio.sleep(delay)
        finally:
            # The countdown is spent or cancelled; from here on this is an ordinary attempt
            self._release_retry(asyncio.current_task())
        await self._run_attempt(request, retries=retries)

    def _release_retry(self, task: asyncio.Task | None) -> None:
        if task is not None and self._retry_task is task:
            self._retry_task = None
            self._pending_retry = None

    def _cancel_pending_retry(self, reason: str) -> None:
        if self._retry_task is not None:
            self._retry_task.cancel()
            self.session_logger.retry_cancelled(reason)
        self._retry_task = None
        self._pending_retry = None
