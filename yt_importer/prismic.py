"""Prismic client: Content API reads plus Asset/Migration API writes."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import httpx

from .models import CandidateDocument, MigrationBatch, MigrationEvent, StagedAsset

log = logging.getLogger(__name__)

Reporter = Callable[[MigrationEvent], None]


class PrismicError(Exception):
    """Base exception for Prismic API failures."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PrismicParsingError(PrismicError):
    """The Content API rejected a query it could not parse."""


class PrismicForbiddenError(PrismicError):
    """Token missing, invalid or without the required permission."""


class PrismicNotFoundError(PrismicError):
    """Repository or resource not found."""


class AssetDownloadError(PrismicError):
    """The asset source URL could not be fetched.

    *source_status* is the HTTP status of the source server, not of Prismic.
    """

    def __init__(self, message: str, source_status: Optional[int] = None):
        super().__init__(message)
        self.source_status = source_status


def at_predicate(path: str, value: str) -> str:
    return f"[at({path}, {json.dumps(value)})]"


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _raise_for_response(response: httpx.Response, context: str) -> None:
    if response.is_success:
        return
    status = response.status_code
    body = _response_body(response)
    message = body.get("message") if isinstance(body, dict) else None
    message = f"{context}: {status} {message or response.reason_phrase}"
    if status == 400 and isinstance(body, dict) and body.get("type") == "parsing-error":
        raise PrismicParsingError(message, status, body)
    if status in (401, 403):
        raise PrismicForbiddenError(message, status, body)
    if status == 404:
        raise PrismicNotFoundError(message, status, body)
    raise PrismicError(message, status, body)


class PrismicClient:
    """
    Thin Prismic API client.

    Reads go through the Content API at *endpoint*, for example
    ``https://<repo>.cdn.prismic.io/api/v2``.
    Writes go through the Asset API and the Migration API with the write token.

    Usage:
        with PrismicClient("my-repo", endpoint, write_token) as prismic:
            doc = prismic.get_first([at_predicate("my.videoarticle.uid", "x")])
    """

    ASSET_API_URL = "https://asset-api.prismic.io"
    MIGRATION_API_URL = "https://migration.prismic.io"

    def __init__(
        self,
        repository: str,
        endpoint: str,
        write_token: str,
        access_token: Optional[str] = None,
        migration_api_key: Optional[str] = None,
        timeout: float = 30.0,
        http: Optional[httpx.Client] = None,
    ):
        self.repository = repository
        self.endpoint = endpoint.rstrip("/")
        self.write_token = write_token
        self.access_token = access_token or write_token
        self.migration_api_key = migration_api_key
        self.timeout = timeout
        self._client = http
        self._master_ref: Optional[str] = None

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized httpx client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "PrismicClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _request(
        self, method: str, url: str, context: str, **kwargs: Any
    ) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            raise PrismicError(f"{context}: {exc}") from exc
        _raise_for_response(response, context)
        return response

    def _write_headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.write_token}",
            "repository": self.repository,
        }
        if self.migration_api_key:
            headers["x-api-key"] = self.migration_api_key
        return headers

    # =========================================================================
    # Content API (read)
    # =========================================================================

    def get_master_ref(self) -> str:
        if self._master_ref is None:
            response = self._request(
                "GET",
                self.endpoint,
                "Prismic repository lookup",
                params={"access_token": self.access_token},
            )
            refs = response.json().get("refs") or []
            master = next((ref for ref in refs if ref.get("isMasterRef")), None)
            if master is None:
                raise PrismicError("Prismic repository has no master ref")
            self._master_ref = master["ref"]
        return self._master_ref

    def get_first(
        self,
        predicates: list[str],
        fetch: Optional[list[str]] = None,
    ) -> Optional[dict[str, Any]]:
        """Return the first document matching every predicate, or None."""
        params: dict[str, Any] = {
            "ref": self.get_master_ref(),
            "q": "[" + "".join(predicates) + "]",
            "pageSize": 1,
            "access_token": self.access_token,
        }
        if fetch is not None:
            params["fetch"] = ",".join(fetch)
        log.debug("Prismic query q=%s fetch=%s", params["q"], params.get("fetch"))
        response = self._request(
            "GET",
            f"{self.endpoint}/documents/search",
            "Prismic query",
            params=params,
        )
        results = response.json().get("results") or []
        return results[0] if results else None

    # =========================================================================
    # Asset / Migration API (write)
    # =========================================================================

    def upload_asset(self, asset: StagedAsset) -> str:
        """Download *asset* from its source URL and host it in the media library."""
        try:
            source = self.client.get(asset.url)
        except httpx.RequestError as exc:
            raise AssetDownloadError(
                f"Asset download {asset.url}: {exc}"
            ) from exc
        if not source.is_success:
            raise AssetDownloadError(
                f"Asset download {asset.url}: "
                f"{source.status_code} {source.reason_phrase}",
                source_status=source.status_code,
            )
        content_type = source.headers.get("content-type", "application/octet-stream")
        response = self._request(
            "POST",
            f"{self.ASSET_API_URL}/assets",
            f"Asset upload {asset.filename}",
            headers=self._write_headers(),
            files={"file": (asset.filename, source.content, content_type)},
            data={"alt": asset.alt} if asset.alt else None,
        )
        asset.asset_id = response.json()["id"]
        log.debug("Uploaded %s as asset %s", asset.url, asset.asset_id)
        return asset.asset_id

    def create_document(self, document: CandidateDocument) -> str:
        payload: dict[str, Any] = {
            "title": document.label,
            "type": document.document_type,
            "lang": document.lang,
            "data": _resolve_assets(document.data),
        }
        if document.uid:
            payload["uid"] = document.uid
        response = self._request(
            "POST",
            f"{self.MIGRATION_API_URL}/documents",
            f"Document create {document.label!r}",
            headers=self._write_headers(),
            json=payload,
        )
        return response.json().get("id", "")

    def migrate(
        self,
        batch: MigrationBatch,
        reporter: Optional[Reporter] = None,
    ) -> list[str]:
        """Upload every staged asset, then create every staged document.

        Stops at the first failure and raises. Created documents are processed
        asynchronously by Prismic and may not be queryable right away.
        """
        report = reporter or (lambda event: None)
        report(
            MigrationEvent(
                "start",
                "ok",
                f"{len(batch.assets)} asset(s), {len(batch.documents)} document(s)",
            )
        )

        for asset in batch.assets:
            report(MigrationEvent("asset:upload", "started", asset.url))
            try:
                asset_id = self.upload_asset(asset)
            except PrismicError as exc:
                report(MigrationEvent("asset:upload", "failed", str(exc)))
                raise
            message = f"{asset.filename} -> {asset_id}"
            report(MigrationEvent("asset:upload", "done", message))

        created: list[str] = []
        for document in batch.documents:
            report(MigrationEvent("document:create", "started", document.label))
            try:
                document_id = self.create_document(document)
            except PrismicError as exc:
                report(MigrationEvent("document:create", "failed", str(exc)))
                raise
            created.append(document_id)
            report(
                MigrationEvent(
                    "document:create", "done", f"{document.label} -> {document_id}"
                )
            )

        report(MigrationEvent("end", "ok", f"{len(created)} document(s) submitted"))
        return created


def _resolve_assets(value: Any) -> Any:
    """Replace staged assets with ``{"id": ...}`` image references."""
    if isinstance(value, StagedAsset):
        if value.asset_id is None:
            return {}
        return {"id": value.asset_id}
    if isinstance(value, dict):
        return {key: _resolve_assets(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_resolve_assets(item) for item in value]
    return value
