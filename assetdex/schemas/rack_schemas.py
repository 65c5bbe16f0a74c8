# assetdex/schemas/rack_schemas.py
"""
Pydantic schemas for the rack availability, occupancy and server move APIs.

Field names on the wire follow the frontend's camelCase contract; unit values
may be sent either as integers or as "U<n>" strings and are parsed here,
before any rack-space logic runs.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from assetdex.rack_space.types import AvailabilityResult, FreeSpace, RackUnitInterval
from assetdex.rack_space.units import parse_unit


# =============================================================================
# Availability check
# =============================================================================

class AvailabilityCheckRequest(BaseModel):
    """Body of POST /api/dcim/racks/check-availability."""
    model_config = ConfigDict(populate_by_name=True)

    rack: str = Field(..., min_length=1, max_length=255, description="Rack name")
    position: int = Field(..., description="Requested start unit, e.g. 25 or 'U25'")
    unit_height: int = Field(..., alias="unitHeight", description="Device height in rack units")
    exclude_server_id: Optional[str] = Field(
        None,
        alias="excludeServerId",
        max_length=36,
        description="Server being edited; it never conflicts with itself",
    )

    @field_validator("position", mode="before")
    @classmethod
    def parse_position(cls, value):
        # InvalidUnitFormat subclasses ValueError, so pydantic reports it as a 422.
        return parse_unit(value)


class ConflictingServerOut(BaseModel):
    id: str
    hostname: str
    unit: int
    unit_height: int

    @classmethod
    def from_interval(cls, interval: RackUnitInterval) -> "ConflictingServerOut":
        return cls(
            id=interval.device_id,
            hostname=interval.label,
            unit=interval.start_unit,
            unit_height=interval.height,
        )


class AvailableSpaceOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_unit: int = Field(..., alias="startUnit")
    end_unit: int = Field(..., alias="endUnit")
    size: int

    @classmethod
    def from_free_space(cls, space: FreeSpace) -> "AvailableSpaceOut":
        return cls(start_unit=space.start_unit, end_unit=space.end_unit, size=space.size)


class SuggestionOut(BaseModel):
    position: int
    reason: str


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    available: bool
    conflicting_servers: Optional[List[ConflictingServerOut]] = Field(None, alias="conflictingServers")
    available_spaces: List[AvailableSpaceOut] = Field(default_factory=list, alias="availableSpaces")
    suggestion: Optional[SuggestionOut] = None

    @classmethod
    def from_result(cls, result: AvailabilityResult) -> "AvailabilityResponse":
        """Map a core result onto the wire shape; empty conflicts are omitted."""
        return cls(
            available=result.available,
            conflicting_servers=(
                [ConflictingServerOut.from_interval(i) for i in result.conflicts]
                if result.conflicts
                else None
            ),
            available_spaces=[AvailableSpaceOut.from_free_space(s) for s in result.free_spaces],
            suggestion=(
                SuggestionOut(position=result.suggestion.start_unit, reason=result.suggestion.reason)
                if result.suggestion
                else None
            ),
        )


# =============================================================================
# Rack occupancy
# =============================================================================

class RackServerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    hostname: str
    serial_number: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    status: Optional[str] = None
    device_type: Optional[str] = None
    unit: Optional[str] = None
    unit_height: Optional[int] = None


class RackOccupancyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    datacenter: Optional[str] = None
    floor: Optional[int] = None
    location: Optional[str] = None
    total_units: int = Field(..., alias="totalUnits")
    used_units: int = Field(..., alias="usedUnits")
    available_units: int = Field(..., alias="availableUnits")
    servers: List[RackServerOut] = Field(default_factory=list)
    available_spaces: List[AvailableSpaceOut] = Field(default_factory=list, alias="availableSpaces")


# =============================================================================
# Server move
# =============================================================================

class ServerMoveRequest(BaseModel):
    """Body of POST /api/dcim/servers/{server_id}/move."""
    model_config = ConfigDict(populate_by_name=True)

    rack: str = Field(..., min_length=1, max_length=255, description="Target rack name")
    position: int = Field(..., description="Target start unit, e.g. 12 or 'U12'")
    unit_height: Optional[int] = Field(
        None,
        alias="unitHeight",
        description="New height in rack units; defaults to the server's current height",
    )
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("position", mode="before")
    @classmethod
    def parse_position(cls, value):
        # InvalidUnitFormat subclasses ValueError, so pydantic reports it as a 422.
        return parse_unit(value)


class PositionHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    server_id: str
    previous_rack: Optional[str] = None
    previous_unit: Optional[str] = None
    previous_unit_height: Optional[int] = None
    new_rack: str
    new_unit: str
    new_unit_height: int
    changed_by: Optional[str] = None
    notes: Optional[str] = None
    changed_at: Optional[datetime] = None
