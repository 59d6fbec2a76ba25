"""
Recurrence preview session - holds the configuration being edited and the
cached preview dates computed from it.

Edits are applied through dispatch(); each one replaces the configuration and
recomputes the preview synchronously. generate_preview_dates() is memoised on
the configuration value, so calling it again without an edit returns the same
tuple.
"""
import logging
from datetime import date
from typing import Any, Iterable

from cadence.config import Settings, get_settings
from cadence.domain.recurrence import OccurrenceExpansion, expand_occurrences
from cadence.domain.recurrence_rule import RecurrenceConfiguration, apply_edit

logger = logging.getLogger(__name__)


def compute_preview(config: RecurrenceConfiguration, settings: Settings | None = None) -> OccurrenceExpansion:
    """Run the generator with the configured ceiling and guard."""
    settings = settings or get_settings()
    expansion = expand_occurrences(
        config,
        ceiling=settings.OCCURRENCE_CEILING,
        guard_factor=settings.ITERATION_GUARD_FACTOR,
    )
    if expansion.guard_exhausted:
        logger.warning(
            "Occurrence guard exhausted after %d steps (type=%s interval=%d start=%s): returning %d date(s)",
            expansion.steps, config.type.value, config.interval, config.start_date, len(expansion.dates),
        )
    return expansion


class RecurrencePreviewSession:
    def __init__(
        self,
        config: RecurrenceConfiguration | None = None,
        settings: Settings | None = None,
        today: date | None = None,
    ):
        self.settings = settings or get_settings()
        self.config = config if config is not None else RecurrenceConfiguration.default(today)
        self._cached_for: RecurrenceConfiguration | None = None
        self._expansion: OccurrenceExpansion | None = None
        self.generate_preview_dates()

    @property
    def preview_dates(self) -> tuple[date, ...]:
        return self._expansion.dates if self._expansion is not None else ()

    @property
    def last_expansion(self) -> OccurrenceExpansion | None:
        return self._expansion

    def dispatch(self, action: str, value: Any = None) -> RecurrenceConfiguration:
        """Apply one edit, then recompute the preview. Returns the new configuration."""
        new_config = apply_edit(self.config, action, value)
        logger.debug("Recurrence edit %s=%r", action, value)
        self.config = new_config
        self.generate_preview_dates()
        return new_config

    def dispatch_all(self, edits: Iterable[tuple[str, Any]]) -> RecurrenceConfiguration:
        # All-or-nothing: the session is left untouched if any edit is rejected
        config = self.config
        for action, value in edits:
            config = apply_edit(config, action, value)
        self.config = config
        self.generate_preview_dates()
        return config

    def generate_preview_dates(self) -> tuple[date, ...]:
        if self._expansion is None or self._cached_for != self.config:
            self._expansion = compute_preview(self.config, self.settings)
            self._cached_for = self.config
        return self._expansion.dates
