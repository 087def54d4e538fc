# See https://peps.python.org/pep-0655/#usage-in-python-3-11
from __future__ import annotations
from typing_extensions import NotRequired, TypedDict

from typing import ClassVar, Iterable, Iterator, Mapping

from attrs import converters, field, frozen, validators

import httpx

from loguru import logger

from pipe import Pipe

from pyrsistent import CheckedPVector, PRecord, field as pfield, thaw, pmap
from pyrsistent.typing import PMap

from returns.result import Result, Success, Failure, safe

from reqres.api.common import \
    attempt_request, \
    default_timeout, \
    RequestResponse, \
    ResponseBodyItem

@frozen(kw_only=True)
class UserRecord:
    '''One user object from the ``data`` array of a users page.

    Keys missing from the JSON object, or set to ``null``, become the zero value
    for the attribute type instead of an error. Values of the wrong type raise
    a TypeError.
    '''

    json_fields: ClassVar[PMap] = pmap({
        'id': 'id',
        'email': 'email',
        'first_name': 'first_name',
        'last_name': 'last_name',
    })
    '''Maps JSON object keys to attribute names.'''

    id: int = field(
        default=0,
        converter=converters.default_if_none(0),
        validator=validators.instance_of(int),
    )
    email: str = field(
        default='',
        converter=converters.default_if_none(''),
        validator=validators.instance_of(str),
    )
    first_name: str = field(
        default='',
        converter=converters.default_if_none(''),
        validator=validators.instance_of(str),
    )
    last_name: str = field(
        default='',
        converter=converters.default_if_none(''),
        validator=validators.instance_of(str),
    )

    @classmethod
    def factory(cls, item: ResponseBodyItem) -> UserRecord:
        if not isinstance(item, Mapping):
            raise TypeError(f'Expected a JSON object for a user, got: {item!r}')
        return cls(**{
            attribute: item[key]
            for key, attribute in cls.json_fields.items()
            if key in item
        })

    @property
    def full_name(self) -> str:
        return f'{self.first_name} {self.last_name}'

    def dump(self) -> str:
        return repr(self)

class UserRecords(CheckedPVector):
    __type__ = UserRecord

class UsersResponseBody(TypedDict):
    page: NotRequired[int]
    per_page: NotRequired[int]
    total: NotRequired[int]
    total_pages: NotRequired[int]
    data: list[Mapping]

@Pipe
def items_to_records(items: Iterable[ResponseBodyItem]) -> Iterator[UserRecord]:
    for item in items:
        yield UserRecord.factory(item)

class ResponseBodyParser:
    @staticmethod
    def items(body:UsersResponseBody) -> list[ResponseBodyItem]:
        if not isinstance(body, Mapping):
            raise ValueError(f'Expected a JSON object response body, got: {type(body).__name__}')
        if 'data' not in body:
            raise ValueError("Response body has no 'data' key")
        items = body['data']
        if not isinstance(items, list):
            raise ValueError(f"Response body 'data' value is not an array: {items!r}")
        return items

    @staticmethod
    def records(body:UsersResponseBody) -> UserRecords:
        return UserRecords(
            ResponseBodyParser.items(body) | items_to_records
        )

class ResponseParser:
    @staticmethod
    def body(response:httpx.Response) -> UsersResponseBody:
        return response.json()

    @staticmethod
    def records(response:httpx.Response) -> UserRecords:
        return ResponseBodyParser.records(
            ResponseParser.body(response)
        )

    @staticmethod
    @safe
    def safe_records(response:httpx.Response) -> Result[UserRecords, Exception]:
        return ResponseParser.records(response)

class UsersRequestSuccess(RequestResponse):
    requested_page = pfield(type=int, mandatory=True)
    records = pfield(type=UserRecords, mandatory=True)

class UsersRequestFailure(PRecord):
    '''Base class for failed page requests. Do not instantiate this class directly.
    Instead, use one of its subclasses, each of which defines ``reason``.
    '''
    requested_page = pfield(type=int, mandatory=True)

    @property
    def reason(self) -> str:
        '''Human-readable description of the failure. Abstract: every subclass overrides it.'''
        raise NotImplementedError

UsersRequestResult = Result[UsersRequestSuccess, UsersRequestFailure]

class UsersRequestNonresponseFailure(UsersRequestFailure):
    '''The request never produced a response: connection refused, DNS failure, timeout, etc.'''
    exception = pfield(type=Exception, mandatory=True)

    @property
    def reason(self) -> str:
        return f'Network/IO Error: {str(self.exception) or type(self.exception).__name__}'

class UsersRequestResponseFailure(UsersRequestFailure, RequestResponse):
    '''The server responded with a status other than 200.'''

    @property
    def reason(self) -> str:
        return f'HTTP Error: {self.response.status_code} - {self.response.text}'

class UsersRequestResponseValidationError(UsersRequestFailure, RequestResponse):
    '''The server responded with 200, but the body was not a valid users page.'''
    validation_error = pfield(type=Exception, mandatory=True)

    @property
    def reason(self) -> str:
        return f'Malformed Response Error: {self.validation_error}'

def assort_response(page_number: int, response: httpx.Response) -> UsersRequestResult:
    if response.status_code != httpx.codes.OK:
        return Failure(
            UsersRequestResponseFailure(requested_page=page_number, response=response)
        )
    match ResponseParser.safe_records(response):
        case Success(records):
            return Success(
                UsersRequestSuccess(requested_page=page_number, response=response, records=records)
            )
        case Failure(validation_error):
            return Failure(
                UsersRequestResponseValidationError(
                    requested_page=page_number,
                    response=response,
                    validation_error=validation_error,
                )
            )

@frozen(kw_only=True)
class Client:
    '''Fetches pages of users from a user-listing endpoint, e.g. ``https://reqres.in/api/users``.

    Client instances are immutable and keep no state between requests, so one
    instance can fetch any number of pages. Use as a context manager to close
    the underlying httpx.Client.
    '''

    httpx_client: httpx.Client = field(init=False)
    '''An httpx.Client object, created by the constructor.'''

    base_url: str = field(validator=validators.instance_of(str))
    '''URL of the endpoint, without the ``page`` query parameter. Required.'''

    timeout: httpx.Timeout = default_timeout
    '''httpx client timeouts. Default: ``httpx.Timeout(10.0, connect=3.0, read=60.0)``.'''

    headers: PMap = pmap({
        'Accept': 'application/json',
        'Accept-Charset': 'utf-8',
    })
    '''HTTP headers to be sent on every request.'''

    transport: httpx.BaseTransport | None = None
    '''Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.'''

    def __attrs_post_init__(self) -> None:
        object.__setattr__(
            self,
            'httpx_client',
            httpx.Client(
                headers=thaw(self.headers),
                timeout=self.timeout,
                transport=self.transport,
            )
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, exc_tb):
        self.httpx_client.close()

    def fetch(self, page_number: int) -> UsersRequestResult:
        '''Requests one page of users. Never raises for network, HTTP or parsing
        errors: those all become a Failure with a ``reason``.'''
        # Keeps any query params already in base_url:
        prepared_request = self.httpx_client.build_request(
            'GET',
            httpx.URL(self.base_url).copy_merge_params({'page': page_number}),
        )
        logger.info('Fetching users page {page} from {url}', page=page_number, url=str(prepared_request.url))

        match attempt_request(self.httpx_client, prepared_request):
            case Success(response):
                result = assort_response(page_number, response)
            case Failure(exception):
                result = Failure(
                    UsersRequestNonresponseFailure(requested_page=page_number, exception=exception)
                )

        match result:
            case Success(success):
                logger.info(
                    'Fetched {count} users from page {page}',
                    count=len(success.records),
                    page=page_number,
                )
            case Failure(failure):
                logger.error(
                    'Failed to fetch users page {page}: {reason}',
                    page=page_number,
                    reason=failure.reason,
                )
        return result
