"""
Tool call models exchanged with the model runtime.

Covers the function-call envelope, the per-tool argument models that make up
the closed set of tool invocations, and the grounded search response with its
grounding chunks.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, TypeAdapter, field_validator


class SchedulingPolicy(str, Enum):
    """How the runtime delivers a tool response relative to the current turn."""
    INTERRUPT = "INTERRUPT"
    NON_INTERRUPTING = "NON_INTERRUPTING"
    WHEN_IDLE = "WHEN_IDLE"
    SILENT = "SILENT"


class MarkerBehavior(str, Enum):
    """Which grounded places get a marker."""
    MENTIONED = "mentioned"
    ALL = "all"
    NONE = "none"


class ToolName(str, Enum):
    """Every tool the dispatcher knows how to run."""
    MAPS_GROUNDING = "mapsGrounding"
    LOCATE_COMMUNITY = "locateCommunity"
    FIND_PROJECTS = "findProjects"


@dataclass
class ToolCallSpec:
    """Declarative contract of a tool, as exposed to the model runtime."""
    name: ToolName
    description: str
    parameters: dict[str, Any]
    scheduling: SchedulingPolicy = SchedulingPolicy.INTERRUPT
    enabled: bool = True

    def to_function_declaration(self) -> dict[str, Any]:
        return {
            "name": self.name.value,
            "description": self.description,
            "parameters": self.parameters,
            "scheduling": self.scheduling.value,
            "isEnabled": self.enabled,
        }


# =============================================================================
# Runtime envelope
# =============================================================================

class FunctionCall(BaseModel):
    """A function call emitted by the model runtime."""
    id: Optional[str] = None
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(BaseModel):
    """The response returned to the model runtime for one function call."""
    id: Optional[str] = None
    name: str
    response: dict[str, Any]
    scheduling: SchedulingPolicy = SchedulingPolicy.INTERRUPT


# =============================================================================
# Tool arguments (closed set of invocations)
# =============================================================================

class _ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LocateCommunityArgs(_ToolArgs):
    community_name: StrictStr = Field(alias="communityName")


class FindProjectsArgs(_ToolArgs):
    community_name: StrictStr = Field(alias="communityName")
    project_type: StrictStr = Field(alias="projectType")


class MapsGroundingArgs(_ToolArgs):
    query: StrictStr
    marker_behavior: MarkerBehavior = Field(
        default=MarkerBehavior.MENTIONED, alias="markerBehavior"
    )
    system_instruction: Optional[StrictStr] = Field(
        default=None, alias="systemInstruction"
    )
    enable_widget: Optional[StrictBool] = Field(default=None, alias="enableWidget")


class LocateCommunityCall(BaseModel):
    name: Literal["locateCommunity"]
    args: LocateCommunityArgs


class FindProjectsCall(BaseModel):
    name: Literal["findProjects"]
    args: FindProjectsArgs


class MapsGroundingCall(BaseModel):
    name: Literal["mapsGrounding"]
    args: MapsGroundingArgs


ToolInvocation = Annotated[
    Union[LocateCommunityCall, FindProjectsCall, MapsGroundingCall],
    Field(discriminator="name"),
]

tool_invocation_adapter: TypeAdapter = TypeAdapter(ToolInvocation)


# =============================================================================
# Grounded search response
# =============================================================================

class GroundingChunk(BaseModel):
    """Evidence item attached to a grounded answer."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    place_id: Optional[str] = Field(default=None, alias="placeId")
    title: Optional[str] = None
    uri: Optional[str] = None
    place_answer_sources: bool = Field(default=False, alias="placeAnswerSources")

    @field_validator("place_answer_sources", mode="before")
    @classmethod
    def coerce_answer_sources(cls, v):
        # The service sends an object of review snippets, possibly empty; presence is what matters.
        return v is not None and v is not False


class _RawChunk(BaseModel):
    model_config = ConfigDict(extra="ignore")

    maps: Optional[GroundingChunk] = None
    web: Optional[dict[str, Any]] = None


class _GroundingMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    grounding_chunks: list[_RawChunk] = Field(default_factory=list, alias="groundingChunks")
    widget_context_token: Optional[str] = Field(
        default=None, alias="googleMapsWidgetContextToken"
    )


class _Part(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None


class _Content(BaseModel):
    model_config = ConfigDict(extra="ignore")

    parts: list[_Part] = Field(default_factory=list)
    role: Optional[str] = None


class _Candidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content: Optional[_Content] = None
    grounding_metadata: Optional[_GroundingMetadata] = Field(
        default=None, alias="groundingMetadata"
    )


class GroundedResponse(BaseModel):
    """A grounded search response; only the first candidate is used."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    candidates: list[_Candidate] = Field(default_factory=list)

    @property
    def text(self) -> Optional[str]:
        if not self.candidates or self.candidates[0].content is None:
            return None
        parts = self.candidates[0].content.parts
        if not parts:
            return None
        return parts[0].text

    @property
    def grounding_chunks(self) -> list[GroundingChunk]:
        if not self.candidates or self.candidates[0].grounding_metadata is None:
            return []
        return [
            raw.maps if raw.maps is not None else GroundingChunk()
            for raw in self.candidates[0].grounding_metadata.grounding_chunks
        ]

    @property
    def widget_context_token(self) -> Optional[str]:
        if not self.candidates or self.candidates[0].grounding_metadata is None:
            return None
        return self.candidates[0].grounding_metadata.widget_context_token

    def to_tool_result(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "groundingChunks": [
                c.model_dump(by_alias=True, exclude_none=True) for c in self.grounding_chunks
            ],
        }
