from concurrent.futures import Future

from httpplug.exceptions import ClientError, ServerError
from httpplug.promise import then
from httpplug.request import Request
from httpplug.response import Response
from httpplug.plugins.types import Continuation


class ErrorPlugin:
    """Turn 4xx responses into ClientError and 5xx responses into ServerError.

    The check is attached to the future returned by the rest of the chain, so it works the same for already resolved
    and pending responses. Other failures pass through untouched.
    """

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        def check(response: Response) -> Response:
            return self.transform_response(request, response)

        return then(next_(request), check)

    def transform_response(self, request: Request, response: Response) -> Response:
        """Raise the typed error matching the response status, return the response otherwise."""
        message = f"{response.status} {response.reason}".rstrip()
        if 400 <= response.status < 500:
            raise ClientError(message, request, response)
        if 500 <= response.status < 600:
            raise ServerError(message, request, response)
        return response
