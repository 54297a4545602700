"""Pantry client adapter over the HTTP dispatch layer."""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import quote

import httpx

from pantry.adapters.pantry.base import AbstractPantryClient, RecordT
from pantry.adapters.transport.base import AbstractDispatcher
from pantry.adapters.transport.dispatcher import HttpDispatcher
from pantry.core.cancellation import CancellationToken
from pantry.core.config import DEFAULT_BASE_URL
from pantry.core.errors import AppError
from pantry.core.logging import operation_scope
from pantry.schemas.pantry import PantryInfo, UpdatedInfo
from pantry.utils.decoding import decode_body, resolve_shape
from pantry.utils.payloads import encode_record, ensure_record

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class HttpPantryClient(AbstractPantryClient):
    """Client for the Pantry REST API.

    Every operation builds exactly one request and hands it to the
    dispatcher, which decides whether admission control applies.
    """

    def __init__(
        self,
        api_key: str,
        *,
        dispatcher: AbstractDispatcher | None = None,
        base_url: str = DEFAULT_BASE_URL,
        strict_decoding: bool = False,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Pantry API key, embedded in every request path as-is.
            dispatcher: Request dispatcher; defaults to an unthrottled one.
            base_url: API base URL without the key segment.
            strict_decoding: Raise DecodeAppError on undecodable responses
                instead of returning default values.
        """
        self._dispatcher = dispatcher or HttpDispatcher()
        self._pantry_url = f"{base_url.rstrip('/')}/{api_key}"
        self.strict_decoding = strict_decoding

    @property
    def dispatcher(self) -> AbstractDispatcher:
        return self._dispatcher

    def _basket_path(self, name: str) -> str:
        return f"/basket/{quote(name, safe='')}"

    @contextmanager
    def _operation(self, operation: str, **fields: Any) -> Iterator[None]:
        """Run an operation under its own correlation id."""
        with operation_scope(uuid.uuid4().hex[:12]):
            logger.debug("pantry.operation", extra={"operation": operation, **fields})
            try:
                yield
            except AppError as exc:
                logger.debug(
                    "pantry.operation_failed",
                    extra={"operation": operation, "error_code": exc.code, **fields},
                )
                raise

    def _send(
        self,
        method: str,
        path: str,
        *,
        content: bytes | None = None,
        cancel: CancellationToken | None,
    ) -> httpx.Response:
        """Dispatch a request relative to the pantry root (path "" or "/basket/x")."""
        headers = JSON_HEADERS if content is not None else None
        response = self._dispatcher.dispatch(
            method,
            self._pantry_url + path,
            content=content,
            headers=headers,
            cancel=cancel,
        )
        if response.status_code != httpx.codes.OK:
            logger.info(
                "pantry.unexpected_status",
                extra={
                    "method": method,
                    "endpoint": path or "/",
                    "status": response.status_code,
                },
            )
        return response

    def _fetch_details(self, cancel: CancellationToken | None) -> PantryInfo:
        response = self._send("GET", "", cancel=cancel)
        return decode_body(response.content, PantryInfo, strict=self.strict_decoding)

    def get_details(self, *, cancel: CancellationToken | None = None) -> PantryInfo:
        with self._operation("get_details"):
            return self._fetch_details(cancel)

    def update_details(
        self,
        info: UpdatedInfo,
        *,
        cancel: CancellationToken | None = None,
    ) -> PantryInfo:
        with self._operation("update_details"):
            body = encode_record(info)
            response = self._send("PUT", "", content=body, cancel=cancel)
            return decode_body(response.content, PantryInfo, strict=self.strict_decoding)

    def create_or_replace_basket(
        self,
        name: str,
        data: Any,
        *,
        cancel: CancellationToken | None = None,
    ) -> bool:
        with self._operation("create_or_replace_basket", basket=name):
            ensure_record(data, operation="create_or_replace_basket")
            body = encode_record(data)
            response = self._send("POST", self._basket_path(name), content=body, cancel=cancel)
            return response.status_code == httpx.codes.OK

    def update_basket_content(
        self,
        name: str,
        data: RecordT,
        *,
        cancel: CancellationToken | None = None,
    ) -> RecordT:
        with self._operation("update_basket_content", basket=name):
            ensure_record(data, operation="update_basket_content")
            body = encode_record(data)
            response = self._send("PUT", self._basket_path(name), content=body, cancel=cancel)
            return decode_body(response.content, data, strict=self.strict_decoding)

    def get_basket_content(
        self,
        name: str,
        shape: Any,
        *,
        cancel: CancellationToken | None = None,
    ) -> Any:
        with self._operation("get_basket_content", basket=name):
            resolved = resolve_shape(shape)
            response = self._send("GET", self._basket_path(name), cancel=cancel)
            return decode_body(response.content, resolved, strict=self.strict_decoding)

    def delete_basket(self, name: str, *, cancel: CancellationToken | None = None) -> bool:
        with self._operation("delete_basket", basket=name):
            response = self._send("DELETE", self._basket_path(name), cancel=cancel)
            return response.status_code == httpx.codes.OK

    def has_basket(self, name: str, *, cancel: CancellationToken | None = None) -> bool:
        with self._operation("has_basket", basket=name):
            info = self._fetch_details(cancel)
            return name in info.basket_names()

    def close(self) -> None:
        self._dispatcher.close()
