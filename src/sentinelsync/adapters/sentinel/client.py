"""Microsoft Sentinel content client over Azure Resource Manager."""

from __future__ import annotations

import asyncio
import re
import threading
import time
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

import httpx
from pydantic import BaseModel, ValidationError

from sentinelsync.adapters.http_resilience import ResilientClient
from sentinelsync.config.sentinel import (
    DEPLOYMENTS_API_VERSION,
    SECURITY_INSIGHTS_API_VERSION,
    WORKBOOKS_API_VERSION,
)
from sentinelsync.domain.model import RuleRef
from sentinelsync.domain.ports import CatalogApplicationError, CatalogTransportError

from .auth import TokenCredentialAuth
from .schema import (
    AlertRuleResource,
    ArmErrorResponse,
    ArmPage,
    ContentPackageResource,
    ContentTemplateResource,
    DeploymentResource,
    MetadataResource,
    WorkbookResource,
)
from .translator import (
    split_workbook_template,
    to_installed_rule,
    to_installed_solution,
    to_installed_workbooks,
    to_rule_template,
    to_solution_entry,
    to_workbook_template,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Coroutine, Mapping

    from sentinelsync.config.http_resilience import ResilienceConfig
    from sentinelsync.config.sentinel import SentinelConfig
    from sentinelsync.domain.model import (
        InstalledRule,
        InstalledSolution,
        InstalledWorkbookMetadata,
        RuleTemplateEntry,
        Severity,
        SolutionEntry,
        SolutionRef,
        WorkbookTemplateDetail,
        WorkbookTemplateEntry,
        WorkspaceParams,
    )

    from .auth import ArmSession

log = getLogger(__name__)

DEPLOYMENT_NAME_MAX_LENGTH: Final = 64
DEPLOYMENT_POLL_SECONDS: Final = 10.0
DEPLOYMENT_TIMEOUT_SECONDS: Final = 1800.0
TERMINAL_DEPLOYMENT_STATES: Final = frozenset({"succeeded", "failed", "canceled"})

_DEPLOYMENT_NAME_INVALID = re.compile(r"[^A-Za-z0-9_.()-]")


def deployment_name(solution_id: str) -> str:
    """ARM deployment name for a solution install."""

    return _DEPLOYMENT_NAME_INVALID.sub("-", solution_id)[:DEPLOYMENT_NAME_MAX_LENGTH]


class SentinelClient:
    """Catalog client reading and writing Sentinel content in one workspace."""

    def __init__(
        self,
        *,
        config: SentinelConfig,
        session: ArmSession | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        deployment_poll_seconds: float = DEPLOYMENT_POLL_SECONDS,
        deployment_timeout_seconds: float = DEPLOYMENT_TIMEOUT_SECONDS,
    ) -> None:
        self._target = config.target
        self._resilience = config.resilience
        if client_factory is None:
            if session is None:
                raise ValueError("SentinelClient needs a session or a client_factory")
            auth = TokenCredentialAuth(session)

            def client_factory(resilience: ResilienceConfig) -> ResilientClient:
                return ResilientClient(resilience, auth=auth)

        self._client_factory = client_factory
        self._deployment_poll_seconds = deployment_poll_seconds
        self._deployment_timeout_seconds = deployment_timeout_seconds
        # every call on this instance shares the request loop and the HTTP client
        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_lock = threading.Lock()
        self._http: ResilientClient | None = None

    def __enter__(self) -> SentinelClient:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the shared HTTP client and stop the request loop."""

        with self._loop_lock:
            loop, self._loop = self._loop, None
        if loop is None:
            return
        if self._http is not None:
            asyncio.run_coroutine_threadsafe(self._http.aclose(), loop).result()
            self._http = None
        loop.call_soon_threadsafe(loop.stop)

    # Solutions ---------------------------------------------------------------

    def list_catalog_solutions(self) -> list[SolutionEntry]:
        items = self._run(
            self._list_all(
                self._insights_path("contentProductPackages"),
                {"$filter": "properties/contentKind eq 'Solution'"},
            )
        )
        entries = (to_solution_entry(_parse(ContentPackageResource, item)) for item in items)
        return [entry for entry in entries if entry is not None]

    def get_solution_detail(self, solution_id: str) -> Mapping[str, object]:
        payload = self._run(
            self._get_json(self._insights_path(f"contentProductPackages/{solution_id}"))
        )
        resource = _parse(ContentPackageResource, payload)
        if not resource.properties.packaged_content:
            raise CatalogApplicationError(
                f"Solution {solution_id} has no packaged content",
                code="MissingPackagedContent",
            )
        return resource.properties.packaged_content

    def list_installed_solution_packages(self) -> list[InstalledSolution]:
        items = self._run(
            self._list_all(
                self._insights_path("contentPackages"),
                {"$filter": "properties/contentKind eq 'Solution'"},
            )
        )
        installed = (to_installed_solution(_parse(ContentPackageResource, item)) for item in items)
        return [entry for entry in installed if entry is not None]

    def install_or_update_solution(
        self,
        solution_id: str,
        packaged_content: Mapping[str, object],
        params: WorkspaceParams,
    ) -> None:
        self._run(self._deploy_solution(solution_id, packaged_content, params))

    async def _deploy_solution(
        self,
        solution_id: str,
        packaged_content: Mapping[str, object],
        params: WorkspaceParams,
    ) -> None:
        name = deployment_name(solution_id)
        url = (
            f"{self._target.resource_group_path}"
            f"/providers/Microsoft.Resources/deployments/{name}"
        )
        query = {"api-version": DEPLOYMENTS_API_VERSION}
        body = {
            "properties": {
                "mode": "Incremental",
                "template": dict(packaged_content),
                "parameters": _deployment_parameters(packaged_content, params),
            }
        }
        client = self._shared_client()
        await self._send(client, "PUT", url, params=query, json=body)
        log.debug("Started deployment %s for solution %s", name, solution_id)
        await self._await_deployment(client, url, query, solution_id)

    async def _await_deployment(
        self,
        client: ResilientClient,
        url: str,
        query: Mapping[str, str],
        solution_id: str,
    ) -> None:
        deadline = time.monotonic() + self._deployment_timeout_seconds
        while True:
            response = await self._send(client, "GET", url, params=query)
            deployment = _parse(DeploymentResource, _json_object(response))
            state = (deployment.properties.provisioning_state or "").casefold()
            if state in TERMINAL_DEPLOYMENT_STATES:
                break
            if time.monotonic() >= deadline:
                raise CatalogTransportError(
                    f"Deployment for {solution_id} did not finish within "
                    f"{self._deployment_timeout_seconds:.0f}s"
                )
            await asyncio.sleep(self._deployment_poll_seconds)

        if state != "succeeded":
            error = deployment.properties.error
            raise CatalogApplicationError(
                (error.message if error and error.message else None)
                or f"Deployment for {solution_id} ended in state {state}",
                code=error.code if error else None,
            )

    # Rules -------------------------------------------------------------------

    def list_rule_templates(
        self,
        severities: Collection[Severity] | None = None,
    ) -> list[RuleTemplateEntry]:
        items = self._run(
            self._list_all(
                self._insights_path("contentTemplates"),
                {
                    "$filter": "properties/contentKind eq 'AnalyticsRule'",
                    "$expand": "properties/mainTemplate",
                },
            )
        )
        templates = (to_rule_template(_parse(ContentTemplateResource, item)) for item in items)
        wanted = frozenset(severities) if severities is not None else None
        return [
            template
            for template in templates
            if template is not None and (wanted is None or template.severity in wanted)
        ]

    def list_installed_rules(self) -> list[InstalledRule]:
        items = self._run(self._list_all(self._insights_path("alertRules")))
        return [to_installed_rule(_parse(AlertRuleResource, item)) for item in items]

    def put_rule(
        self,
        rule_id: str,
        kind: str,
        properties: Mapping[str, object],
    ) -> RuleRef:
        path = self._insights_path(f"alertRules/{rule_id}")
        payload = self._run(self._put_json(path, {"kind": kind, "properties": dict(properties)}))
        resource = _parse(AlertRuleResource, payload) if payload else None
        return RuleRef(
            name=resource.name if resource else rule_id,
            resource_id=resource.id if resource and resource.id else path,
        )

    def put_rule_metadata(
        self,
        rule: RuleRef,
        *,
        source: SolutionRef | None,
        template_name: str,
        template_version: str | None,
    ) -> None:
        properties: dict[str, object] = {
            "contentId": template_name,
            "parentId": rule.resource_id,
            "kind": "AnalyticsRule",
            "source": _metadata_source(source, self._target.workspace),
        }
        if template_version:
            properties["version"] = template_version
        path = self._insights_path(f"metadata/analyticsrule-{rule.name}")
        self._run(self._put_json(path, {"properties": properties}))

    # Workbooks ---------------------------------------------------------------

    def list_workbook_templates(self) -> list[WorkbookTemplateEntry]:
        items = self._run(
            self._list_all(
                self._insights_path("contentTemplates"),
                {"$filter": "properties/contentKind eq 'Workbook'"},
            )
        )
        return [to_workbook_template(_parse(ContentTemplateResource, item)) for item in items]

    def list_installed_workbook_metadata(self) -> list[InstalledWorkbookMetadata]:
        """Workbook metadata records plus the Sentinel workbooks no record links to."""

        metadata = self._run(
            self._list_all(
                self._insights_path("metadata"),
                {"$filter": "properties/kind eq 'Workbook'"},
            )
        )
        workbooks = self._run(
            self._list_all(
                f"{self._target.resource_group_path}/providers/Microsoft.Insights/workbooks",
                {"category": "sentinel"},
                api_version=WORKBOOKS_API_VERSION,
            )
        )
        workspace = self._target.workspace_resource_id.casefold()
        in_workspace = [
            workbook
            for workbook in (_parse(WorkbookResource, item) for item in workbooks)
            if (workbook.properties.source_id or workspace).casefold() == workspace
        ]
        return to_installed_workbooks(
            [_parse(MetadataResource, item) for item in metadata], in_workspace
        )

    def get_workbook_template_detail(self, template_id: str) -> WorkbookTemplateDetail:
        payload = self._run(
            self._get_json(self._insights_path(f"contentTemplates/{template_id}"))
        )
        try:
            return split_workbook_template(_parse(ContentTemplateResource, payload))
        except ValueError as exc:
            raise CatalogApplicationError(str(exc), code="InvalidTemplate") from exc

    def put_workbook(
        self,
        workbook_id: str,
        payload: Mapping[str, object],
        location: str,
    ) -> str:
        path = self._workbook_path(workbook_id)
        body = {**payload, "location": location}
        response = self._run(self._put_json(path, body, api_version=WORKBOOKS_API_VERSION))
        resource_id = response.get("id") if response else None
        return resource_id if isinstance(resource_id, str) and resource_id else path

    def delete_workbook(self, workbook_id: str) -> None:
        self._run(self._delete(self._workbook_path(workbook_id), WORKBOOKS_API_VERSION))

    def delete_workbook_metadata(self, metadata_id: str) -> None:
        self._run(
            self._delete(
                self._insights_path(f"metadata/{metadata_id}"), SECURITY_INSIGHTS_API_VERSION
            )
        )

    def put_workbook_metadata(self, metadata_id: str, payload: Mapping[str, object]) -> None:
        self._run(self._put_json(self._insights_path(f"metadata/{metadata_id}"), dict(payload)))

    # Transport ---------------------------------------------------------------

    def _run[T](self, coro: Coroutine[Any, Any, T]) -> T:
        """Run ``coro`` on the request loop and block until it finishes.

        Callers may be on any thread; all of them share one loop and one HTTP client.
        """

        return asyncio.run_coroutine_threadsafe(coro, self._request_loop()).result()

    def _request_loop(self) -> asyncio.AbstractEventLoop:
        with self._loop_lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                threading.Thread(
                    target=_serve_forever, args=(loop,), name="sentinelsync-arm", daemon=True
                ).start()
                self._loop = loop
            return self._loop

    def _shared_client(self) -> ResilientClient:
        # only called from coroutines running on the request loop
        if self._http is None:
            self._http = self._client_factory(self._resilience)
        return self._http

    def _insights_path(self, suffix: str) -> str:
        return (
            f"{self._target.workspace_resource_id}"
            f"/providers/Microsoft.SecurityInsights/{suffix}"
        )

    def _workbook_path(self, workbook_id: str) -> str:
        return (
            f"{self._target.resource_group_path}"
            f"/providers/Microsoft.Insights/workbooks/{workbook_id}"
        )

    async def _list_all(
        self,
        path: str,
        extra_params: Mapping[str, str] | None = None,
        *,
        api_version: str = SECURITY_INSIGHTS_API_VERSION,
    ) -> list[dict[str, Any]]:
        params: dict[str, str] | None = {
            "api-version": api_version,
            **(extra_params or {}),
        }
        url: str | None = path
        items: list[dict[str, Any]] = []
        client = self._shared_client()
        while url:
            response = await self._send(client, "GET", url, params=params)
            page = _parse(ArmPage, response.json())
            items.extend(page.value)
            url = page.next_link
            # nextLink already carries the query string
            params = None
        log.debug("Listed %s items from %s", len(items), path)
        return items

    async def _get_json(self, path: str) -> dict[str, Any]:
        response = await self._send(
            self._shared_client(),
            "GET",
            path,
            params={"api-version": SECURITY_INSIGHTS_API_VERSION},
        )
        return _json_object(response)

    async def _put_json(
        self,
        path: str,
        body: Mapping[str, object],
        *,
        api_version: str = SECURITY_INSIGHTS_API_VERSION,
    ) -> dict[str, Any]:
        response = await self._send(
            self._shared_client(), "PUT", path, params={"api-version": api_version}, json=body
        )
        return _json_object(response) if response.content else {}

    async def _delete(self, path: str, api_version: str) -> None:
        await self._send(
            self._shared_client(), "DELETE", path, params={"api-version": api_version}
        )

    async def _send(
        self,
        client: ResilientClient,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        json: object = None,
    ) -> httpx.Response:
        try:
            if json is None:
                response = await client.request(method, url, params=params)
            else:
                response = await client.request(method, url, params=params, json=json)
        except httpx.HTTPError as exc:
            raise CatalogTransportError(f"{method} {url} failed: {exc}") from exc

        if response.status_code in {401, 403}:
            raise CatalogTransportError(
                f"{method} {url} was not authorized ({response.status_code})"
            )
        if response.is_error:
            raise _application_error(method, url, response)
        return response


def _serve_forever(loop: asyncio.AbstractEventLoop) -> None:
    asyncio.set_event_loop(loop)
    try:
        loop.run_forever()
    finally:
        loop.close()


def _application_error(method: str, url: str, response: httpx.Response) -> CatalogApplicationError:
    code: str | None = None
    message = response.text or response.reason_phrase
    try:
        error = ArmErrorResponse.model_validate(response.json()).error
    except (ValueError, ValidationError):
        pass
    else:
        code = error.code
        message = error.message or message
    log.debug("%s %s -> %s %s", method, url, response.status_code, code)
    return CatalogApplicationError(message, status_code=response.status_code, code=code)


def _parse[ModelT: BaseModel](model: type[ModelT], payload: object) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise CatalogApplicationError(
            f"Unexpected {model.__name__} payload: {exc}", code="InvalidResponse"
        ) from exc


def _json_object(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise CatalogApplicationError(
            f"Response from {response.request.url} is not JSON", code="InvalidResponse"
        ) from exc
    if not isinstance(payload, dict):
        raise CatalogApplicationError(
            f"Response from {response.request.url} is not a JSON object", code="InvalidResponse"
        )
    return payload


def _deployment_parameters(
    packaged_content: Mapping[str, object],
    params: WorkspaceParams,
) -> dict[str, dict[str, str]]:
    """Workspace parameters, limited to the ones the template declares."""

    values = {"workspace": params.workspace, "workspace-location": params.location}
    declared = packaged_content.get("parameters")
    if isinstance(declared, dict):
        values = {key: value for key, value in values.items() if key in declared}
    return {key: {"value": value} for key, value in values.items()}


def _metadata_source(source: SolutionRef | None, workspace: str) -> dict[str, str]:
    if source is None:
        return {"kind": "LocalWorkspace", "name": workspace}
    return {"kind": "Solution", "name": source.display_name, "sourceId": source.package_id}
