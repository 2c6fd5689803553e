"""Azure Resource Manager payload schemas for Sentinel content APIs."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _stringify(value: object) -> object:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


Version = Annotated[str | None, BeforeValidator(_stringify)]


class ArmModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ArmErrorDetail(ArmModel):
    code: str | None = None
    message: str | None = None
    details: list[ArmErrorDetail] = Field(default_factory=list)


class ArmErrorResponse(ArmModel):
    error: ArmErrorDetail


class ArmPage(ArmModel):
    value: list[dict[str, Any]] = Field(default_factory=list)
    next_link: str | None = Field(default=None, alias="nextLink")


class ContentPackageProperties(ArmModel):
    content_id: str | None = Field(default=None, alias="contentId")
    content_kind: str | None = Field(default=None, alias="contentKind")
    display_name: str | None = Field(default=None, alias="displayName")
    version: Version = None
    packaged_content: dict[str, Any] | None = Field(default=None, alias="packagedContent")


class ContentPackageResource(ArmModel):
    id: str | None = None
    name: str
    properties: ContentPackageProperties = Field(default_factory=ContentPackageProperties)


class ContentTemplateProperties(ArmModel):
    content_id: str | None = Field(default=None, alias="contentId")
    content_kind: str | None = Field(default=None, alias="contentKind")
    display_name: str | None = Field(default=None, alias="displayName")
    version: Version = None
    package_id: str | None = Field(default=None, alias="packageId")
    main_template: dict[str, Any] | None = Field(default=None, alias="mainTemplate")


class ContentTemplateResource(ArmModel):
    id: str | None = None
    name: str
    properties: ContentTemplateProperties = Field(default_factory=ContentTemplateProperties)


class AlertRuleResource(ArmModel):
    id: str | None = None
    name: str
    kind: str | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class MetadataSource(ArmModel):
    kind: str | None = None
    name: str | None = None
    source_id: str | None = Field(default=None, alias="sourceId")


class MetadataProperties(ArmModel):
    content_id: str | None = Field(default=None, alias="contentId")
    parent_id: str | None = Field(default=None, alias="parentId")
    kind: str | None = None
    version: Version = None
    display_name: str | None = Field(default=None, alias="displayName")
    source: MetadataSource | None = None


class MetadataResource(ArmModel):
    id: str | None = None
    name: str
    properties: MetadataProperties = Field(default_factory=MetadataProperties)


class WorkbookProperties(ArmModel):
    display_name: str | None = Field(default=None, alias="displayName")
    category: str | None = None
    source_id: str | None = Field(default=None, alias="sourceId")


class WorkbookResource(ArmModel):
    id: str | None = None
    name: str
    properties: WorkbookProperties = Field(default_factory=WorkbookProperties)


class DeploymentError(ArmModel):
    code: str | None = None
    message: str | None = None


class DeploymentProperties(ArmModel):
    provisioning_state: str | None = Field(default=None, alias="provisioningState")
    error: DeploymentError | None = None


class DeploymentResource(ArmModel):
    name: str | None = None
    properties: DeploymentProperties = Field(default_factory=DeploymentProperties)
