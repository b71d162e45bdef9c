"""Events emitted by device sessions and updates pushed to the hub."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from .devices import DeviceClass


@dataclass(frozen=True)
class ErrorEvent:
    address: str
    code: str


@dataclass(frozen=True)
class StateChangeEvent:
    address: str
    device_class: DeviceClass
    raw_state: str


@dataclass(frozen=True)
class PowerReadingEvent:
    address: str
    device_class: DeviceClass
    raw_state: str | None
    instant_power: float
    data: Mapping[str, Any] = field(default_factory=dict)


DeviceEvent = ErrorEvent | StateChangeEvent | PowerReadingEvent


class ComponentUpdate(BaseModel):
    """New value of one logical component, serialized for the hub."""

    model_config = {"frozen": True, "populate_by_name": True}

    device_id: str = Field(serialization_alias="uniqueDeviceId")
    component: str
    value: Any

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


UpdateCallback = Callable[[dict[str, Any]], Awaitable[object]]
