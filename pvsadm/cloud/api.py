"""Authenticated IBM Cloud REST access shared by the API modules."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

IAM_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"
REQUEST_TIMEOUT = 60

_JSON_KINDS = {dict: "object", list: "array"}


@dataclass(frozen=True)
class Endpoints:
    """Service base URLs for one IBM Cloud environment.

    ``power_iaas_url`` and ``cos_url`` are templates taking ``{region}``.
    """

    iam_url: str
    resource_controller_url: str
    power_iaas_url: str
    cos_url: str


ENVIRONMENTS = {
    "prod": Endpoints(
        iam_url="https://iam.cloud.ibm.com",
        resource_controller_url="https://resource-controller.cloud.ibm.com",
        power_iaas_url="https://{region}.power-iaas.cloud.ibm.com",
        cos_url="https://s3.{region}.cloud-object-storage.appdomain.cloud",
    ),
    "test": Endpoints(
        iam_url="https://iam.test.cloud.ibm.com",
        resource_controller_url="https://resource-controller.test.cloud.ibm.com",
        power_iaas_url="https://{region}.power-iaas.test.cloud.ibm.com",
        cos_url="https://s3.{region}.cloud-object-storage.test.appdomain.cloud",
    ),
}


class CloudAPIError(RuntimeError):
    """Non-2xx response from an IBM Cloud API."""

    def __init__(self, status_code, message, url=""):
        super().__init__(f"{status_code} {message}" + (f" ({url})" if url else ""))
        self.status_code = status_code
        self.message = message
        self.url = url


@dataclass
class CloudSession:
    """HTTP client, bearer token and endpoints shared by every API call of a run."""

    client: httpx.AsyncClient
    token: str
    endpoints: Endpoints


def _error_message(resp):
    """Pull a human-readable message out of an error response body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text.strip() or resp.reason_phrase

    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            return errors[0].get("message", str(errors[0]))
        for key in ("description", "message", "errorMessage", "error"):
            if body.get(key):
                return str(body[key])
    return str(body)


def _json_body(resp, url, expect=dict):
    """Decode a 2xx JSON body, raising CloudAPIError when it is not JSON of type *expect*."""
    try:
        body = resp.json()
    except ValueError:
        raise CloudAPIError(resp.status_code, "malformed response: body is not JSON", url) from None
    if not isinstance(body, expect):
        raise CloudAPIError(resp.status_code, f"malformed response: expected a JSON {_JSON_KINDS[expect]}", url)
    return body


async def get_iam_token(client, api_key, iam_url):
    """Exchange an IBM Cloud API key for an IAM bearer token.

    POST /identity/token
    """
    url = f"{iam_url}/identity/token"
    resp = await client.post(
        url,
        data={"grant_type": IAM_GRANT_TYPE, "apikey": api_key},
        headers={"Accept": "application/json"},
        timeout=REQUEST_TIMEOUT,
    )
    if resp.is_error:
        raise CloudAPIError(resp.status_code, _error_message(resp), url)
    token = _json_body(resp, url).get("access_token")
    if not token:
        raise CloudAPIError(resp.status_code, "malformed response: no access_token", url)
    return token


async def send_request(session, method, url, json=None, params=None, headers=None):
    """Send an authenticated request and return the raw httpx response.

    Raises:
        CloudAPIError: on any non-2xx status.
    """
    all_headers = {"Authorization": f"Bearer {session.token}", "Accept": "application/json"}
    if headers:
        all_headers.update(headers)

    logger.debug(f"{method} {url}")
    resp = await session.client.request(
        method, url, json=json, params=params, headers=all_headers, timeout=REQUEST_TIMEOUT
    )
    if resp.is_error:
        raise CloudAPIError(resp.status_code, _error_message(resp), url)
    return resp


async def api_request(session, method, url, json=None, params=None, headers=None, expect=dict):
    """Make an authenticated JSON request.

    Args:
        expect: JSON type of the body, ``dict`` (object) or ``list`` (array).

    Returns:
        Parsed JSON body, or an empty *expect* value for an empty body.

    Raises:
        CloudAPIError: on a non-2xx status or a body that is not JSON of
            the expected type.
    """
    resp = await send_request(session, method, url, json=json, params=params, headers=headers)
    if not resp.content:
        return expect()
    return _json_body(resp, url, expect)


@asynccontextmanager
async def open_session(api_key, environment="prod", transport=None):
    """Open an HTTP client, authenticate once, and yield a CloudSession."""
    if environment not in ENVIRONMENTS:
        raise ValueError(f"Unknown environment '{environment}'. Allowed values are {sorted(ENVIRONMENTS)}")
    endpoints = ENVIRONMENTS[environment]

    async with httpx.AsyncClient(transport=transport) as client:
        token = await get_iam_token(client, api_key, endpoints.iam_url)
        yield CloudSession(client=client, token=token, endpoints=endpoints)
