'''Sequential page-by-page fetching, stopping at the first empty page or failure.

The driver is a small state machine::

    FETCHING --non-empty page--> CONTINUE --> FETCHING (next page)
    FETCHING --empty page------> STOPPED (exhausted)
    FETCHING --failure---------> STOPPED (failed)
    CONTINUE --page cap--------> STOPPED (page limit)

Only one request is ever in flight, and no page is requested after the
driver stops.
'''
from __future__ import annotations

from enum import Enum
from typing import Callable, Protocol

from attrs import field, frozen, validators

from loguru import logger

from returns.result import Success, Failure

from reqres.api.users import UserRecords, UsersRequestFailure, UsersRequestResult

class State(Enum):
    FETCHING = 'fetching'
    CONTINUE = 'continue'
    STOPPED = 'stopped'

class StopReason(Enum):
    EXHAUSTED = 'exhausted'
    FAILED = 'failed'
    PAGE_LIMIT = 'page_limit'

class PageFetcher(Protocol):
    '''Any function that fetches one page, e.g. ``Client.fetch``.'''
    def __call__(self, page_number: int) -> UsersRequestResult:
        ...

PageHandler = Callable[[int, UserRecords], None]

def ignore_page(page_number: int, records: UserRecords) -> None:
    pass

@frozen(kw_only=True)
class PaginationReport:
    '''How and where pagination stopped.'''

    stop_reason: StopReason = field(validator=validators.instance_of(StopReason))

    pages_fetched: int
    '''Number of fetch calls made, including the final empty or failed page.'''

    last_page: int
    '''Number of the last page requested.'''

    records_count: int = 0

    failure: UsersRequestFailure | None = None

    max_pages: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.stop_reason is StopReason.EXHAUSTED

    @property
    def reason(self) -> str | None:
        return self.failure.reason if self.failure is not None else None

    @property
    def summary(self) -> str:
        match self.stop_reason:
            case StopReason.EXHAUSTED:
                return 'All available pages fetched successfully.'
            case StopReason.FAILED:
                return 'Pagination terminated due to an error.'
            case StopReason.PAGE_LIMIT:
                return f'Stopped after reaching the maximum of {self.max_pages} pages.'

def paginate(
    fetch: PageFetcher,
    on_page: PageHandler = ignore_page,
    first_page: int = 1,
    max_pages: int | None = None,
) -> PaginationReport:
    '''Fetches pages ``first_page``, ``first_page + 1``, ... until a page is empty,
    a fetch fails, or ``max_pages`` pages have been fetched. ``on_page`` receives
    the page number and records of every non-empty page, in order.

    ``max_pages`` defaults to no limit, which relies on the endpoint eventually
    returning an empty page.
    '''
    if first_page < 1:
        raise ValueError(f'first_page must be at least 1, got {first_page}')
    if max_pages is not None and max_pages < 1:
        raise ValueError(f'max_pages must be at least 1, got {max_pages}')

    state = State.FETCHING
    page_number = first_page
    pages_fetched = 0
    records_count = 0
    report = None

    while True:
        match state:
            case State.FETCHING:
                result = fetch(page_number)
                pages_fetched += 1
                match result:
                    case Success(success) if len(success.records) > 0:
                        on_page(page_number, success.records)
                        records_count += len(success.records)
                        state = State.CONTINUE
                    case Success(_):
                        logger.info('No more users found on page {page}', page=page_number)
                        report = PaginationReport(
                            stop_reason=StopReason.EXHAUSTED,
                            pages_fetched=pages_fetched,
                            last_page=page_number,
                            records_count=records_count,
                            max_pages=max_pages,
                        )
                        state = State.STOPPED
                    case Failure(failure):
                        report = PaginationReport(
                            stop_reason=StopReason.FAILED,
                            pages_fetched=pages_fetched,
                            last_page=page_number,
                            records_count=records_count,
                            failure=failure,
                            max_pages=max_pages,
                        )
                        state = State.STOPPED
            case State.CONTINUE:
                if max_pages is not None and pages_fetched >= max_pages:
                    logger.warning(
                        'Reached the maximum of {max_pages} pages at page {page}',
                        max_pages=max_pages,
                        page=page_number,
                    )
                    report = PaginationReport(
                        stop_reason=StopReason.PAGE_LIMIT,
                        pages_fetched=pages_fetched,
                        last_page=page_number,
                        records_count=records_count,
                        max_pages=max_pages,
                    )
                    state = State.STOPPED
                else:
                    page_number += 1
                    state = State.FETCHING
            case State.STOPPED:
                logger.info(
                    'Pagination stopped: {stop_reason}, {pages_fetched} pages fetched',
                    stop_reason=report.stop_reason.value,
                    pages_fetched=report.pages_fetched,
                )
                return report
