"""Shared GET helper that maps requests failures onto the hub error types."""

import logging

import requests

import config
from errors import NotFoundError, UpstreamError

log = logging.getLogger(__name__)


def get_json(provider, url, params=None, headers=None, not_found_message=None):
    """GET url and return the decoded JSON body.

    A 404 from the provider raises NotFoundError; every other failure
    (network, non-2xx status, undecodable body) raises UpstreamError.
    """
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=config.HTTP_TIMEOUT)
    except requests.RequestException as exc:
        log.error("%s request failed: %s", provider, exc)
        raise UpstreamError(provider, f"{provider} request failed: {exc.__class__.__name__}") from exc

    if resp.status_code == 404:
        raise NotFoundError(not_found_message or f"{provider} reported no match")

    try:
        resp.raise_for_status()
    except requests.HTTPError as exc:
        log.error("%s returned status %s", provider, resp.status_code)
        raise UpstreamError(
            provider,
            f"{provider} request failed with status code {resp.status_code}",
            upstream_status=resp.status_code,
        ) from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamError(provider, f"{provider} returned an invalid JSON body") from exc
