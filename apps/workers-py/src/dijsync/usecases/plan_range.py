"""Work out the issue-date window the next portal query should cover.

The planner combines the explicit ``--from/--to`` bounds, the
``--resume/--redownload`` modes and what is already archived on disk. When
the archive holds invoices and ``--resume`` was not given, the operator is
asked through an injected confirmation callable so the decision stays
testable without a terminal.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..domain import constants
from ..domain.archive import LocalInvoiceState
from ..domain.errors import (
    ConfigurationError,
    ConflictingFlagsError,
    InvalidRangeError,
    PromptError,
)

ResumeConfirm = Callable[[dt.date], bool]


@dataclass(frozen=True)
class DateRange:
    """Inclusive issue-date window; ``None`` leaves that side unbounded.

    Explicit bounds always satisfy ``date_from <= date_to``. Resuming past an
    explicit ``--to`` yields an empty window (``is_empty``) rather than an
    error; such a window is never sent to the portal.
    """

    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None

    @property
    def is_open(self) -> bool:
        return self.date_from is None and self.date_to is None

    @property
    def is_empty(self) -> bool:
        return (
            self.date_from is not None
            and self.date_to is not None
            and self.date_from > self.date_to
        )


def parse_date_flag(name: str, value: Optional[str]) -> Optional[dt.date]:
    if not value:
        return None
    try:
        return dt.datetime.strptime(value, constants.DATE_FORMAT).date()
    except ValueError as exc:
        raise ConfigurationError(
            f"invalid --{name} date {value!r}, expected {constants.DATE_LAYOUT_HINT}"
        ) from exc


def check_flags(
    date_from: Optional[dt.date],
    date_to: Optional[dt.date],
    resume: bool,
    redownload: bool,
) -> None:
    if resume and redownload:
        raise ConflictingFlagsError()
    if date_from is not None and date_to is not None and date_from > date_to:
        raise InvalidRangeError(date_from, date_to)


def is_affirmative(answer: Optional[str]) -> bool:
    return (answer or "").strip().lower() in constants.AFFIRMATIVE_ANSWERS


def prompt_resume(latest_date: dt.date, input_fn: Optional[Callable[[str], str]] = None) -> bool:
    """Ask whether to continue from the day after ``latest_date``; Enter means yes."""
    input_fn = input_fn or input
    resume_from = latest_date + dt.timedelta(days=1)
    question = (
        f"Existing invoices detected up to {latest_date.isoformat()}. "
        f"Resume from {resume_from.isoformat()}? [Y/n]: "
    )
    try:
        answer = input_fn(question)
    except EOFError as exc:
        raise PromptError("unable to read prompt input") from exc
    return is_affirmative(answer)


def plan_date_range(
    date_from: Optional[dt.date],
    date_to: Optional[dt.date],
    resume: bool,
    redownload: bool,
    local_state: LocalInvoiceState,
    confirm: ResumeConfirm = prompt_resume,
) -> DateRange:
    check_flags(date_from, date_to, resume, redownload)

    if redownload:
        logging.info("Redownload requested: ignoring local history and date bounds")
        return DateRange()

    if not local_state.found or local_state.latest_date is None:
        return DateRange(date_from, date_to)

    should_resume = resume or confirm(local_state.latest_date)
    if not should_resume:
        return DateRange(date_from, date_to)

    resume_from = local_state.latest_date + dt.timedelta(days=1)
    if date_to is not None and resume_from > date_to:
        logging.warning(
            "Resume date %s is after --to %s; the window is empty",
            resume_from.isoformat(),
            date_to.isoformat(),
        )
    logging.info("Resuming from %s", resume_from.isoformat())
    return DateRange(resume_from, date_to)
