"""Mappings API client - versions, namespaces, search, sources."""

from typing import Any

from linkie_client.base import BaseClient
from linkie_client.cancel import CancelToken


class LinkieClient(BaseClient):
    """Client for the mappings API endpoints."""

    async def versions(self) -> dict[str, list[dict]]:
        """GET /api/versions/all - versions per loader."""
        return await self._get("/api/versions/all")

    async def namespaces(self) -> list[dict]:
        """GET /api/namespaces - namespaces with their versions and capabilities."""
        return await self._get("/api/namespaces")

    async def search(
        self,
        namespace: str,
        version: str,
        query: str,
        allow_classes: bool = True,
        allow_fields: bool = True,
        allow_methods: bool = True,
        translate_mode: str | None = None,
        translate_as: str | None = None,
        limit: int = 100,
        token: CancelToken | None = None,
    ) -> dict[str, Any]:
        """GET /api/search - mapping search, abortable through `token`."""
        params = {
            "namespace": namespace,
            "query": query or "",
            "version": version,
            "limit": limit,
            "allowClasses": allow_classes,
            "allowFields": allow_fields,
            "allowMethods": allow_methods,
            "translateMode": translate_mode or "ns",
        }
        if translate_as:
            params["translate"] = translate_as

        request = self._get("/api/search", params)
        if token is None:
            return await request
        return await token.run(request)

    async def source(self, namespace: str, version: str, class_name: str) -> Any:
        """GET /api/source - decompiled source of a class."""
        return await self._get("/api/source", {"namespace": namespace, "class": class_name, "version": version})

    async def status_source(self, namespace: str) -> Any:
        """GET /api/status/sources/{namespace} - source availability."""
        return await self._get(f"/api/status/sources/{namespace}")
