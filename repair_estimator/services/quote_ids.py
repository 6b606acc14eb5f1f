import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime

from tenacity import RetryError, Retrying, retry_if_exception_type, stop_after_attempt

from repair_estimator.config import get_settings
from repair_estimator.config.sections import QuoteIds
from repair_estimator.exceptions import (
    QuoteIdCollisionError,
    QuoteIdExhaustedError,
    SequenceOverflowError,
)
from repair_estimator.models import Quote
from repair_estimator.repository import Repository, SortDescriptor

logger = logging.getLogger(__name__)

ID_PREFIX = "Q"
SEQUENCE_LENGTH = 6
MAX_SEQUENCE = 10**SEQUENCE_LENGTH - 1
QUOTE_ID_RE = re.compile(r"^Q-\d{4}-\d{6}$")


def format_quote_id(year: int, sequence: int) -> str:
    if sequence > MAX_SEQUENCE:
        raise SequenceOverflowError(year)
    return f"{ID_PREFIX}-{year:04d}-{sequence:0{SEQUENCE_LENGTH}d}"


def is_valid_id(quote_id: str) -> bool:
    return isinstance(quote_id, str) and QUOTE_ID_RE.match(quote_id) is not None


def _components(quote_id: str) -> list[str] | None:
    if not is_valid_id(quote_id):
        return None
    return quote_id.split("-")


def parse_year(quote_id: str) -> int | None:
    parts = _components(quote_id)
    return int(parts[1]) if parts else None


def parse_sequence(quote_id: str) -> int | None:
    parts = _components(quote_id)
    return int(parts[2]) if parts else None


def year_prefix(year: int) -> str:
    return f"{ID_PREFIX}-{year:04d}-"


@dataclass(frozen=True)
class QuoteIDStatistics:
    year: int
    total_quotes: int
    latest_sequence: int
    next_sequence: int

    @property
    def next_quote_id(self) -> str:
        return f"{ID_PREFIX}-{self.year:04d}-{self.next_sequence:0{SEQUENCE_LENGTH}d}"


class QuoteIDGenerator:
    """Issues ``Q-YYYY-NNNNNN`` identifiers, one sequence per company and year.

    Allocation for a (company, year) scope runs under a single lock and keeps a
    high-water mark of issued sequences, so IDs handed out before their quotes
    are saved are never reissued by this process. Writers outside the process
    are caught by the exact-match check, which moves on to the next sequence a
    bounded number of times.
    """

    def __init__(self, repository: Repository, policy: QuoteIds | None = None) -> None:
        self.repository = repository
        self.policy = policy or get_settings().quote_ids
        self._locks: dict[tuple[str, int], threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._last_issued: dict[tuple[str, int], int] = {}

    def _scope_lock(self, scope: tuple[str, int]) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(scope, threading.Lock())

    def generate_unique_id(self, company_id: str, *, now: datetime | None = None) -> str:
        year = (now or datetime.now()).year
        scope = (company_id, year)
        max_attempts = max(1, int(self.policy.max_allocation_attempts))

        with self._scope_lock(scope):
            start = max(self.next_sequence_number(year, company_id), self._last_issued.get(scope, 0) + 1)
            attempt_number = 0
            try:
                for attempt in Retrying(
                    stop=stop_after_attempt(max_attempts),
                    retry=retry_if_exception_type(QuoteIdCollisionError),
                    reraise=False,
                ):
                    with attempt:
                        attempt_number = attempt.retry_state.attempt_number
                        quote_id = self._claim(company_id, year, start + attempt_number - 1)
            except RetryError as error:
                logger.error(
                    "Quote ID allocation for %s exhausted after %d attempts", company_id, max_attempts
                )
                raise QuoteIdExhaustedError(company_id, max_attempts) from error

            self._last_issued[scope] = start + attempt_number - 1

        logger.info(f"Generated quote ID {quote_id} for {company_id}")
        return quote_id

    def _claim(self, company_id: str, year: int, sequence: int) -> str:
        quote_id = format_quote_id(year, sequence)
        if self.is_taken(quote_id, company_id):
            logger.warning("Quote ID %s already taken; trying next sequence", quote_id)
            raise QuoteIdCollisionError(quote_id)
        return quote_id

    def next_sequence_number(self, year: int, company_id: str) -> int:
        return self._highest_sequence(year, company_id) + 1

    def _highest_sequence(self, year: int, company_id: str) -> int:
        prefix = year_prefix(year)
        quotes = self.repository.query(
            Quote,
            lambda quote: quote.company_id == company_id and quote.id.startswith(prefix),
            (SortDescriptor("id", ascending=False),),
        )
        if not quotes:
            return 0

        sequences = [parse_sequence(quote.id) for quote in quotes]
        valid_sequences = [sequence for sequence in sequences if sequence is not None]
        if len(valid_sequences) != len(quotes):
            logger.warning("Found %d quotes with malformed IDs for %s", len(quotes) - len(valid_sequences), prefix)
        if not valid_sequences:
            return len(quotes)
        return max(valid_sequences)

    def is_taken(self, quote_id: str, company_id: str) -> bool:
        matches = self.repository.query(
            Quote,
            lambda quote: quote.company_id == company_id and quote.id == quote_id,
        )
        return bool(matches)

    def yearly_statistics(self, year: int, company_id: str) -> QuoteIDStatistics:
        prefix = year_prefix(year)
        quotes = self.repository.query(
            Quote,
            lambda quote: quote.company_id == company_id and quote.id.startswith(prefix),
        )
        sequences = [parse_sequence(quote.id) for quote in quotes]
        latest_sequence = max((sequence for sequence in sequences if sequence is not None), default=0)
        return QuoteIDStatistics(
            year=year,
            total_quotes=len(quotes),
            latest_sequence=latest_sequence,
            next_sequence=latest_sequence + 1,
        )

    def current_year_statistics(self, company_id: str, *, now: datetime | None = None) -> QuoteIDStatistics:
        return self.yearly_statistics((now or datetime.now()).year, company_id)
