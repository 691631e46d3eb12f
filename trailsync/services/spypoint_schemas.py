"""Pydantic schemas for the Spypoint REST API wire format.

The vendor payloads are inconsistent between camera generations (missing
blocks, ``config`` vs ``Config``), so every field carries a default and
unknown fields are ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "FAR_FUTURE_DATE_END",
    "SpypointCamera",
    "SpypointCameraConfig",
    "SpypointCameraStatus",
    "SpypointCredentials",
    "SpypointLoginResponse",
    "SpypointPhoto",
    "SpypointPhotoBatch",
    "SpypointPhotoVariant",
    "SpypointPhotosRequest",
    "SpypointSubscription",
]

# dateEnd sentinel used to request the most recent photos
FAR_FUTURE_DATE_END = "2100-01-01T00:00:00.000Z"


class _VendorModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# Login


class SpypointCredentials(_VendorModel):
    username: str
    password: str = Field(repr=False)


class SpypointLoginResponse(_VendorModel):
    token: str = Field(min_length=1, repr=False)
    uuid: str = Field(default="", validation_alias=AliasChoices("uuid", "sessionId"))


# Cameras


class SpypointSensibility(_VendorModel):
    high: int = 0
    level: str = ""
    low: int = 0
    medium: int = 0


class SpypointTransmitTime(_VendorModel):
    hour: int = 0
    minute: int = 0


class SpypointCameraConfig(_VendorModel):
    battery_type: str = ""
    capture: bool = False
    capture_mode: str = ""
    date_format: str = ""
    delay: str = ""
    multi_shot: int = 0
    name: str = ""
    operation_mode: str = ""
    quality: str = ""
    schedule: list[list[int]] = Field(default_factory=list)
    sensibility: SpypointSensibility = Field(default_factory=SpypointSensibility)
    small_pic_width: int = 0
    stamp: bool = False
    temperature_unit: str = ""
    time_format: int = 0
    transmit_auto: bool = False
    transmit_format: str = ""
    transmit_freq: int = 0
    transmit_time: SpypointTransmitTime = Field(default_factory=SpypointTransmitTime)
    transmit_user: bool = False
    trigger_speed: str = ""


class SpypointPosition(_VendorModel):
    type: str = ""
    # GeoJSON order: [longitude, latitude]
    coordinates: list[float] = Field(default_factory=list)


class SpypointCoordinate(_VendorModel):
    date_time: str = ""
    latitude: str = ""
    longitude: str = ""
    position: SpypointPosition = Field(default_factory=SpypointPosition)
    geohash: str = ""


class SpypointMemory(_VendorModel):
    size: int = 0
    used: int = 0


class SpypointProcessedSignal(_VendorModel):
    percentage: int = 0
    bar: int = 0
    low_signal: bool = False


class SpypointSignal(_VendorModel):
    bar: int = 0
    dbm: int = Field(default=0, alias="dBm")
    mcc: int = 0
    mnc: int = 0
    type: str = ""
    processed: SpypointProcessedSignal = Field(default_factory=SpypointProcessedSignal)


class SpypointTemperature(_VendorModel):
    unit: str = ""
    value: int = 0


class SpypointCapability(_VendorModel):
    hd_request: bool = False
    survival_mode: bool = False
    video: bool = False


class SpypointCameraStatus(_VendorModel):
    batteries: list[int] = Field(default_factory=list)
    battery_type: str = ""
    capability: SpypointCapability = Field(default_factory=SpypointCapability)
    install_date: str = ""
    last_update: str = ""
    memory: SpypointMemory = Field(default_factory=SpypointMemory)
    model: str = ""
    modem_firmware: str = ""
    notifications: list[Any] = Field(default_factory=list)
    serial: int = 0
    signal: SpypointSignal = Field(default_factory=SpypointSignal)
    sim: str = ""
    temperature: SpypointTemperature = Field(default_factory=SpypointTemperature)
    version: str = ""
    coordinates: list[SpypointCoordinate] = Field(default_factory=list)


class SpypointPlan(_VendorModel):
    id: str = ""
    name: str = ""
    is_active: bool = False
    is_free: bool = False
    photo_count_per_month: int = 0


class SpypointSubscription(_VendorModel):
    id: str = ""
    camera_id: str = ""
    payment_status: str = ""
    is_active: bool = False
    plan: SpypointPlan = Field(default_factory=SpypointPlan)
    currency: str = ""
    payment_frequency: str = ""
    is_free: bool = False
    start_date_billing_cycle: str = ""
    end_date_billing_cycle: str = ""
    month_end_billing_cycle: str = ""
    photo_count: int = 0
    is_auto_renew: bool = False


class SpypointCamera(_VendorModel):
    """Camera as returned by ``/camera/all`` and ``/camera/{id}``."""

    id: str = ""
    activation_date: str = ""
    config: SpypointCameraConfig = Field(
        default_factory=SpypointCameraConfig,
        validation_alias=AliasChoices("config", "Config"),
    )
    hd_since: str = ""
    status: SpypointCameraStatus = Field(default_factory=SpypointCameraStatus)
    ucid: str = ""
    user: str = ""
    is_cellular: bool = False
    subscriptions: list[SpypointSubscription] = Field(default_factory=list)
    data_matrix_key: str = ""
    ptp_notifications: list[Any] = Field(default_factory=list)


# Photos


class SpypointPhotosRequest(_VendorModel):
    camera: list[str]
    date_end: str = FAR_FUTURE_DATE_END
    media_types: list[str] = Field(default_factory=list)
    species: list[str] = Field(default_factory=list)
    limit: int = 125


class SpypointHeader(_VendorModel):
    name: str = ""
    value: str = ""


class SpypointPhotoVariant(_VendorModel):
    verb: str = "GET"
    path: str = ""
    host: str = ""
    headers: list[SpypointHeader] = Field(default_factory=list)

    @property
    def url(self) -> str:
        return f"https://{self.host}/{self.path.lstrip('/')}"


class SpypointPhoto(_VendorModel):
    id: str = ""
    date: str = ""
    tag: list[str] = Field(default_factory=list)
    origin_name: str = ""
    origin_size: int = 0
    origin_date: str = ""
    small: SpypointPhotoVariant = Field(default_factory=SpypointPhotoVariant)
    medium: SpypointPhotoVariant = Field(default_factory=SpypointPhotoVariant)
    large: SpypointPhotoVariant = Field(default_factory=SpypointPhotoVariant)
    hd: SpypointPhotoVariant | None = None
    camera: str = ""


class SpypointPhotoBatch(_VendorModel):
    photos: list[SpypointPhoto] = Field(default_factory=list)
    camera_id: Any = None
    camera_ids: list[str] = Field(default_factory=list)
    count_photos: int = 0
