# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
People endpoints, including emails and custom field data.

File-valued custom fields go through the upload service first: the file
is downloaded from its source URL, uploaded to Planning Center, and the
returned file id is then written as the field value through the normal
request pipeline.
"""

from __future__ import annotations

import asyncio
import builtins
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..auth.headers import build_auth_header
from ..core.executor import JsonDocument
from ..core.query import build_query_params
from ..exceptions import ConfigurationError, PcoError
from ..types.context import ContextLike, RequestContext
from ..types.errors import ErrorCategory, ErrorSeverity
from .base import BaseResource

logger = logging.getLogger(__name__)


class PeopleResource(BaseResource):
    """
    Access to ``/people`` and its nested emails and field data.

    Example:
        >>> people = client.people
        >>> active = await people.get_all(where={"status": "active"})
        >>> await people.create_email("123", {"address": "a@example.com"})
    """

    async def list(
        self,
        where: Mapping[str, Any] | None = None,
        include: Iterable[str] | None = None,
        per_page: int | None = None,
        page: int | None = None,
        order: str | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        """Fetch one page of people."""
        endpoint = "/people"
        return await self.executor.get(
            endpoint,
            build_query_params(
                where=where, include=include, per_page=per_page, page=page, order=order
            ),
            self._context(context, endpoint, "GET"),
        )

    async def get_all(
        self,
        where: Mapping[str, Any] | None = None,
        include: Iterable[str] | None = None,
        per_page: int = 100,
        context: ContextLike = None,
    ) -> builtins.list[Any]:
        """Fetch every person matching ``where`` across all pages."""
        endpoint = "/people"
        return await self.paginator.get_all_pages(
            endpoint,
            build_query_params(where=where, include=include, per_page=per_page),
            self._context(context, endpoint, "GET"),
        )

    async def get(
        self,
        person_id: str,
        include: Iterable[str] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        endpoint = f"/people/{person_id}"
        return await self.executor.get(
            endpoint,
            build_query_params(include=include),
            self._context(context, endpoint, "GET", person_id=person_id),
        )

    async def create(
        self, attributes: Mapping[str, Any], context: ContextLike = None
    ) -> JsonDocument | None:
        endpoint = "/people"
        return await self.executor.post(
            endpoint, attributes, context=self._context(context, endpoint, "POST")
        )

    async def update(
        self,
        person_id: str,
        attributes: Mapping[str, Any],
        context: ContextLike = None,
    ) -> JsonDocument | None:
        endpoint = f"/people/{person_id}"
        return await self.executor.patch(
            endpoint,
            attributes,
            context=self._context(context, endpoint, "PATCH", person_id=person_id),
        )

    async def delete(self, person_id: str, context: ContextLike = None) -> None:
        endpoint = f"/people/{person_id}"
        await self.executor.delete(
            endpoint,
            context=self._context(context, endpoint, "DELETE", person_id=person_id),
        )

    # === Emails ===

    async def list_emails(
        self, person_id: str, context: ContextLike = None
    ) -> JsonDocument | None:
        endpoint = f"/people/{person_id}/emails"
        return await self.executor.get(
            endpoint,
            context=self._context(context, endpoint, "GET", person_id=person_id),
        )

    async def create_email(
        self,
        person_id: str,
        attributes: Mapping[str, Any],
        context: ContextLike = None,
    ) -> JsonDocument | None:
        endpoint = f"/people/{person_id}/emails"
        return await self.executor.post(
            endpoint,
            attributes,
            context=self._context(context, endpoint, "POST", person_id=person_id),
        )

    # === Field data ===

    async def list_field_data(
        self, person_id: str, context: ContextLike = None
    ) -> JsonDocument | None:
        endpoint = f"/people/{person_id}/field_data"
        return await self.executor.get(
            endpoint,
            context=self._context(context, endpoint, "GET", person_id=person_id),
        )

    async def create_field_data(
        self,
        person_id: str,
        field_definition_id: str,
        value: str,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        """Set a custom field value for a person."""
        endpoint = f"/people/{person_id}/field_data"
        return await self.executor.post(
            endpoint,
            {"field_definition_id": field_definition_id, "value": value},
            context=self._context(context, endpoint, "POST", person_id=person_id),
        )

    async def delete_field_data(
        self, person_id: str, field_data_id: str, context: ContextLike = None
    ) -> None:
        endpoint = f"/people/{person_id}/field_data/{field_data_id}"
        await self.executor.delete(
            endpoint,
            context=self._context(
                context,
                endpoint,
                "DELETE",
                person_id=person_id,
                field_data_id=field_data_id,
            ),
        )

    async def create_file_field_data(
        self,
        person_id: str,
        field_definition_id: str,
        file_url: str,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        """
        Upload the file at ``file_url`` and store it in a file-type field.

        Args:
            person_id: Person to update
            field_definition_id: File-type field definition
            file_url: Where to download the file from
            context: Caller context attached to any error

        Raises:
            ConfigurationError: If the resource has no file transport
            PcoError: ``external_api`` if the download or upload fails;
                otherwise whatever the field data request raises
        """
        if self.file_transport is None:
            raise ConfigurationError("No file transport configured for file uploads")

        endpoint = f"/people/{person_id}/field_data"
        ctx = self._context(
            context,
            endpoint,
            "POST",
            person_id=person_id,
            operation="create_file_field_data",
            originalFileUrl=file_url,
        )

        try:
            file = await self.file_transport.download(file_url)
            headers: dict[str, str] = {}
            auth = build_auth_header(self.executor.config)
            if auth:
                headers["Authorization"] = auth
            file_id = await self.file_transport.upload(file, headers)
        except asyncio.CancelledError:
            raise
        except PcoError as e:
            raise e.with_context(ctx) from e.cause
        except Exception as e:
            raise PcoError(
                f"File upload failed: {e}" if str(e) else "File upload failed",
                category=ErrorCategory.EXTERNAL_API,
                severity=ErrorSeverity.HIGH,
                retryable=False,
                context=ctx,
                cause=e,
            ) from e

        logger.debug(f"Uploaded {file.filename} for person {person_id} as {file_id}")
        return await self.create_field_data(
            person_id,
            field_definition_id,
            file_id,
            ctx.merge({"metadata": {"uploadedFileUUID": file_id}}),
        )


__all__ = ["PeopleResource"]
