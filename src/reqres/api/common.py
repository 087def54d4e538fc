from typing import Mapping

import httpx

from pyrsistent import PRecord, field as pfield

from returns.result import Result, safe

RequestResult = Result[httpx.Response, Exception]
ResponseBodyItem = Mapping

default_timeout: httpx.Timeout = httpx.Timeout(10.0, connect=3.0, read=60.0)

@safe
def attempt_request(
    httpx_client: httpx.Client,
    prepared_request: httpx.Request,
) -> RequestResult:
    '''Sends a prepared request exactly once. Any exception raised while sending,
    e.g. httpx.ConnectError or httpx.TimeoutException, becomes a Failure.'''
    return httpx_client.send(prepared_request)

class RequestResponse(PRecord):
    response = pfield(type=httpx.Response, mandatory=True)

    @property
    def status_code(self) -> int:
        return self.response.status_code
