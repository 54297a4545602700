from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TypeVar

from pantry.core.cancellation import CancellationToken
from pantry.schemas.pantry import PantryInfo, UpdatedInfo

RecordT = TypeVar("RecordT")


class AbstractPantryClient(ABC):
	"""Interface for Pantry clients.

	Every operation issues one HTTP request (has_basket issues one details
	fetch) and accepts an optional cancellation token.
	"""

	@abstractmethod
	def get_details(self, *, cancel: CancellationToken | None = None) -> PantryInfo:
		"""Return the pantry metadata, including its baskets."""
		...

	@abstractmethod
	def update_details(
		self,
		info: UpdatedInfo,
		*,
		cancel: CancellationToken | None = None,
	) -> PantryInfo:
		"""Update the pantry name/description and return the new metadata."""
		...

	@abstractmethod
	def create_or_replace_basket(
		self,
		name: str,
		data: Any,
		*,
		cancel: CancellationToken | None = None,
	) -> bool:
		"""Create or replace basket ``name`` with ``data``.

		Returns:
			bool: True iff the service answered 200.

		Raises:
			PayloadTypeAppError: If data is not a record; no request is sent.
		"""
		...

	@abstractmethod
	def update_basket_content(
		self,
		name: str,
		data: RecordT,
		*,
		cancel: CancellationToken | None = None,
	) -> RecordT:
		"""Merge ``data`` into basket ``name`` and return the updated content.

		The response is decoded into the type of ``data``; fields missing from
		the response keep the values of ``data``.

		Raises:
			PayloadTypeAppError: If data is not a record; no request is sent.
		"""
		...

	@abstractmethod
	def get_basket_content(
		self,
		name: str,
		shape: Any,
		*,
		cancel: CancellationToken | None = None,
	) -> Any:
		"""Fetch basket ``name`` decoded into ``shape``.

		Args:
			name: Basket name.
			shape: Record class, record instance (values used as defaults), or dict.
		"""
		...

	@abstractmethod
	def delete_basket(self, name: str, *, cancel: CancellationToken | None = None) -> bool:
		"""Delete basket ``name`` and all its data.

		Returns:
			bool: True iff the service answered 200.
		"""
		...

	@abstractmethod
	def has_basket(self, name: str, *, cancel: CancellationToken | None = None) -> bool:
		"""Return True if the pantry lists a basket called ``name``."""
		...

	@abstractmethod
	def close(self) -> None:
		"""Release resources held by the client."""
		...

	def __enter__(self) -> AbstractPantryClient:
		return self

	def __exit__(self, *exc_info: object) -> None:
		self.close()
