"""HTTPX-based implementation of the ClusterStatusStorePort.

Talks to a Kubernetes-style API server: the cluster resource is read with
GET and its status subresource written with PUT, where
``metadata.resourceVersion`` acts as the optimistic concurrency token.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from pgnode.adapters.ports import ClusterStatusStorePort
from pgnode.domain.cluster import ClusterStatusRecord
from pgnode.domain.exceptions import EventDecodeError, StatusConflictError

logger = logging.getLogger(__name__)


class HttpxClusterStatusStore:
    """Cluster status store backed by the orchestration API over HTTP.

    This adapter implements ClusterStatusStorePort for the promotion
    coordinator and the configuration materializer.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_group: str = "postgresql.k8s.enterprisedb.io",
        api_version: str = "v1alpha1",
        token: str | None = None,
        verify: str | bool = True,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            base_url: API server URL (e.g., "https://kubernetes.default.svc").
            api_group: API group of the cluster resource.
            api_version: API version of the cluster resource.
            token: Optional bearer token.
            verify: CA bundle path or TLS verification flag.
            timeout: Request timeout in seconds. Defaults to 10.0.
            client: Optional httpx.Client for dependency injection (testing).
                   If not provided, a new client is created per request.
        """
        self._base_url = base_url.rstrip("/")
        self._api_group = api_group
        self._api_version = api_version
        self._verify = verify
        self._timeout = timeout
        self._client = client
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _cluster_url(self, namespace: str, name: str) -> str:
        return (
            f"{self._base_url}/apis/{self._api_group}/{self._api_version}"
            f"/namespaces/{namespace}/clusters/{name}"
        )

    def _request(self, method: str, url: str, json: Any = None) -> httpx.Response:
        if self._client is not None:
            return self._client.request(
                method, url, headers=self._headers, json=json, timeout=self._timeout
            )
        with httpx.Client(verify=self._verify) as client:
            return client.request(
                method, url, headers=self._headers, json=json, timeout=self._timeout
            )

    def get(self, namespace: str, name: str) -> ClusterStatusRecord:
        """Fetch the cluster resource.

        Raises:
            httpx.HTTPStatusError: For HTTP errors (4xx, 5xx).
            httpx.RequestError: For network failures.
            EventDecodeError: If the returned object is not a valid cluster.
        """
        response = self._request("GET", self._cluster_url(namespace, name))
        response.raise_for_status()
        return _decode(response)

    def update_status(self, record: ClusterStatusRecord) -> ClusterStatusRecord:
        """Replace the status subresource of the cluster.

        Raises:
            StatusConflictError: On HTTP 409 (stale resourceVersion).
            httpx.HTTPStatusError: For other HTTP errors.
        """
        url = self._cluster_url(record.namespace, record.name) + "/status"
        response = self._request("PUT", url, json=record.to_object())
        if response.status_code == httpx.codes.CONFLICT:
            logger.debug(
                "status write of %s/%s rejected at version %s",
                record.namespace,
                record.name,
                record.resource_version,
            )
            raise StatusConflictError(
                f"cluster {record.namespace}/{record.name} was modified "
                f"since version {record.resource_version}",
                resource_version=record.resource_version,
            )
        response.raise_for_status()
        return _decode(response)


def _decode(response: httpx.Response) -> ClusterStatusRecord:
    try:
        body = response.json()
    except ValueError as e:
        raise EventDecodeError(f"cluster response is not JSON: {e}") from e
    if not isinstance(body, dict):
        raise EventDecodeError("cluster response is not an object")
    return ClusterStatusRecord.from_object(body)


# Runtime protocol check
assert isinstance(HttpxClusterStatusStore("http://localhost"), ClusterStatusStorePort)
