from abc import ABC, abstractmethod
from typing import Mapping

import httpx

from pantry.core.cancellation import CancellationToken


class AbstractDispatcher(ABC):
	"""Interface for executing outbound HTTP requests on behalf of a client."""

	@abstractmethod
	def dispatch(
		self,
		method: str,
		url: str,
		*,
		content: bytes | None = None,
		headers: Mapping[str, str] | None = None,
		cancel: CancellationToken | None = None,
	) -> httpx.Response:
		"""Execute one HTTP request and return the raw response.

		Args:
			method: HTTP verb.
			url: Absolute request URL.
			content: Optional request body.
			headers: Optional request headers.
			cancel: Optional cancellation token honoured while waiting.

		Returns:
			httpx.Response: The response, whatever its status code.

		Raises:
			CancelledAppError: If the token fires before the response is returned.
			TransportAppError: If the transport fails.
		"""
		...

	@abstractmethod
	def close(self) -> None:
		"""Release transport resources owned by the dispatcher."""
		...
