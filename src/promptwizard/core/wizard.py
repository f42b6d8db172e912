"""Step-by-step prompt wizard.

:class:`PromptWizard` walks the user through a fixed sequence of category
steps, keeping one selected option per step, and recomputes the assembled
prompt from those selections on demand.

States
------
``Step(i)`` for ``0 <= i < N`` and ``Complete``.

==============  =========================================================
Transition      Effect
==============  =========================================================
select_option   record the option for the current step, then advance
                (``Complete`` after the last step)
back            ``Step(i) -> Step(i-1)``; no-op at step 0; from
                ``Complete`` returns to the last step
skip            clear the current step's selection, then advance
skip_to_end     ``-> Complete``, only if at least one selection exists
reset           ``-> Step(0)`` with selections and prompt state cleared
==============  =========================================================

Option Fetching
---------------
Entering a step schedules an option fetch on the running event loop and
returns immediately.  Each fetch captures a token (step index, fetch
version).  When a fetch completes, its result is applied only if the token
still matches; a fetch that resolves after the user moved on, or after a
newer fetch for the same step started, is discarded.  Fetches are never
cancelled.

Without a running event loop nothing is scheduled; call
:meth:`PromptWizard.load_options` to fetch explicitly.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from promptwizard.core.catalog import WIZARD_STEPS
from promptwizard.core.errors import PromptWizardError
from promptwizard.core.models import Category, GenerationOptions, Option, OptionsResult
from promptwizard.core.prompt_assembler import assemble_prompt

logger = logging.getLogger(__name__)


class OptionProvider(Protocol):
    """Anything that can produce options for a step (e.g. ``OptionGenerator``)."""

    async def generate(
        self,
        category: str,
        selections=None,
        *,
        reroll: bool = False,
        previous_labels=(),
        model: str | None = None,
    ) -> OptionsResult: ...


class Enhancer(Protocol):
    async def enhance(self, prompt: str, options: GenerationOptions | None = None) -> str: ...


class PromptWizard:
    """State machine for the guided prompt builder.

    Args:
        option_source: Provider of step options.
        steps: Ordered wizard steps; defaults to the standard seven.
        generation_options: User configuration (the LLM model is taken from
            here when fetching options).
        auto_fetch: Schedule a fetch whenever a step is entered.

    Attributes:
        step_index (int): Index of the current step.
        is_complete (bool): Whether the wizard reached ``Complete``.
        selections (dict[str, Option]): Selected option per category id.
        options (list[Option]): Options displayed for the current step.
        options_source (str | None): ``"llm"`` or ``"fallback"`` for the
            displayed options.
        loading (bool): Whether the latest fetch is still in flight.
        error (str | None): Last user-visible error.
        enhanced_prompt (str): Result of the last :meth:`enhance` call.
    """

    def __init__(
        self,
        option_source: OptionProvider,
        *,
        steps: Sequence[Category] = WIZARD_STEPS,
        generation_options: GenerationOptions | None = None,
        auto_fetch: bool = True,
    ) -> None:
        if not steps:
            raise ValueError("A wizard needs at least one step")
        self.option_source = option_source
        self.steps: tuple[Category, ...] = tuple(steps)
        self.generation_options = generation_options or GenerationOptions()
        self.auto_fetch = auto_fetch

        self.step_index = 0
        self.is_complete = False
        self.selections: dict[str, Option] = {}
        self.options: list[Option] = []
        self.options_source: str | None = None
        self.loading = False
        self.error: str | None = None
        self.enhanced_prompt = ""
        self._edited_prompt: str | None = None

        self._fetch_version = 0
        self._tasks: set[asyncio.Task] = set()

        self._enter_step()

    # ------------------------------------------------------------------
    # Derived state.
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> Category:
        return self.steps[self.step_index]

    @property
    def current_category(self) -> str:
        return self.current_step.id

    @property
    def progress(self) -> float:
        """Fraction of the wizard covered, 1.0 once complete."""
        if self.is_complete:
            return 1.0
        return (self.step_index + 1) / len(self.steps)

    @property
    def assembled_prompt(self) -> str:
        """Prompt recomputed from the current selections ("" when none)."""
        if not self.selections:
            return ""
        return assemble_prompt(self.selections)

    @property
    def prompt(self) -> str:
        """The edited prompt if one was set, else the assembled prompt."""
        if self._edited_prompt is not None:
            return self._edited_prompt
        return self.assembled_prompt

    @property
    def is_prompt_edited(self) -> bool:
        return self._edited_prompt is not None

    @property
    def final_prompt(self) -> str:
        """The prompt to send for image generation."""
        return self.enhanced_prompt or self.prompt

    # ------------------------------------------------------------------
    # Transitions.
    # ------------------------------------------------------------------

    def select_option(self, option: Option) -> None:
        """Record *option* for the current step and advance."""
        if self.is_complete:
            logger.debug("select_option ignored: wizard is complete")
            return
        self.selections[self.current_category] = option
        self.enhanced_prompt = ""
        logger.debug(f"Selected '{option.label}' for step '{self.current_category}'")
        self._advance()

    def back(self) -> None:
        """Return to the previous step (or the last step from ``Complete``)."""
        if self.is_complete:
            self.is_complete = False
            self.step_index = len(self.steps) - 1
            self._enter_step()
        elif self.step_index > 0:
            self.step_index -= 1
            self._enter_step()

    def skip(self) -> None:
        """Leave the current step unset and advance."""
        if self.is_complete:
            return
        self.selections.pop(self.current_category, None)
        self.enhanced_prompt = ""
        self._advance()

    def skip_to_end(self) -> bool:
        """Jump to ``Complete`` if anything has been selected.

        Returns:
            ``True`` if the wizard is now complete.
        """
        if not self.selections:
            return False
        self._complete()
        return True

    def reset(self) -> None:
        """Return to the first step and clear all selections and prompt state."""
        self.step_index = 0
        self.is_complete = False
        self.selections.clear()
        self.enhanced_prompt = ""
        self._edited_prompt = None
        self.error = None
        self._enter_step()

    def edit_prompt(self, text: str) -> None:
        """Override the assembled prompt until :meth:`reset_edited_prompt`."""
        self._edited_prompt = text

    def reset_edited_prompt(self) -> None:
        self._edited_prompt = None

    def reroll(self) -> asyncio.Task | None:
        """Schedule a reroll fetch for the current step."""
        return self._schedule(reroll=True)

    def _advance(self) -> None:
        if self.step_index + 1 < len(self.steps):
            self.step_index += 1
            self._enter_step()
        else:
            self._complete()

    def _complete(self) -> None:
        self.is_complete = True
        self.options = []
        self.options_source = None
        self.loading = False
        # Invalidate any fetch still in flight.
        self._fetch_version += 1

    def _enter_step(self) -> None:
        self.options = []
        self.options_source = None
        self.loading = False
        # Results of fetches started on an earlier visit are stale.
        self._fetch_version += 1
        if self.auto_fetch:
            self._schedule(reroll=False)

    # ------------------------------------------------------------------
    # Asynchronous work.
    # ------------------------------------------------------------------

    def _schedule(self, *, reroll: bool) -> asyncio.Task | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        request = self._begin_fetch(reroll)
        if request is None:
            return None
        task = loop.create_task(self._fetch(*request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _begin_fetch(self, reroll: bool) -> tuple | None:
        """Mark a new fetch as the current one and capture its request."""
        if self.is_complete:
            return None
        self._fetch_version += 1
        token = (self.step_index, self._fetch_version)
        previous = [o.label for o in self.options] if reroll else []
        self.loading = True
        self.error = None
        return token, self.current_category, dict(self.selections), reroll, previous

    def _is_current(self, token: tuple[int, int]) -> bool:
        return not self.is_complete and token == (self.step_index, self._fetch_version)

    async def load_options(self, *, reroll: bool = False) -> bool:
        """Fetch options for the current step and apply them if still current.

        Args:
            reroll: Ask for options different from those on screen.

        Returns:
            ``True`` if the result was applied, ``False`` if it was stale.
        """
        request = self._begin_fetch(reroll)
        if request is None:
            return False
        return await self._fetch(*request)

    async def _fetch(self, token, category, selections, reroll, previous) -> bool:
        try:
            result = await self.option_source.generate(
                category,
                selections,
                reroll=reroll,
                previous_labels=previous,
                model=self.generation_options.llm_model,
            )
        except Exception as e:
            if not self._is_current(token):
                return False
            logger.error(f"Loading options for '{category}' failed: {e}")
            self.loading = False
            self.error = f"Failed to load options: {e}"
            return False

        if not self._is_current(token):
            logger.debug(f"Discarding stale options for '{category}' (token {token})")
            return False

        self.options = list(result.options)
        self.options_source = result.source
        self.loading = False
        if result.error:
            logger.info(f"Options for '{category}' came from the catalog: {result.error}")
        return True

    async def wait_for_pending(self) -> None:
        """Wait until every scheduled fetch has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def enhance(self, enhancer: Enhancer) -> str:
        """Enhance the current prompt and store the result.

        Raises:
            PromptWizardError: If there is nothing to enhance, or whatever
                the enhancer raises (the message is also kept in ``error``).
        """
        prompt = self.prompt
        if not prompt.strip():
            raise PromptWizardError("There is no prompt to enhance yet")
        try:
            self.enhanced_prompt = await enhancer.enhance(prompt, self.generation_options)
        except PromptWizardError as e:
            self.error = str(e)
            raise
        return self.enhanced_prompt
