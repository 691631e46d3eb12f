"""Unit tests for vendor payload parsing and record mapping."""

from datetime import UTC, datetime

import pytest

from trailsync.models import Camera, Picture, new_record_id, parse_vendor_datetime
from trailsync.models.camera import CAMERA_TYPE_SPYPOINT
from trailsync.services.spypoint_schemas import (
    SpypointCamera,
    SpypointPhoto,
    SpypointPhotoBatch,
)


@pytest.fixture
def clover_field(load_fixture):
    return SpypointCamera.model_validate(load_fixture("spypoint/camera.json"))


@pytest.fixture
def flex_camera(load_fixture):
    return SpypointCamera.model_validate(load_fixture("spypoint/cameras_all.json")[0])


@pytest.fixture
def photo_batch(load_fixture):
    return SpypointPhotoBatch.model_validate(load_fixture("spypoint/photos.json"))


class TestVendorSchemas:
    """Parsing of recorded Spypoint payloads."""

    def test_capitalized_config_key(self, clover_field):
        assert clover_field.config.name == "Clover Field"
        assert clover_field.config.transmit_time.hour == 14

    def test_camera_status(self, clover_field):
        status = clover_field.status
        assert status.batteries == [82]
        assert status.signal.dbm == -113
        assert status.signal.processed.bar == 2
        assert status.memory.size == 29568
        assert status.coordinates == []

    def test_camera_coordinates(self, flex_camera):
        position = flex_camera.status.coordinates[0].position
        assert position.coordinates == [-80.439992, 25.544241]

    def test_photo_variants(self, photo_batch):
        photo = photo_batch.photos[0]
        assert photo.id == "669859240be0b2c3a252c536"
        assert photo.origin_date == "2024-07-17T19:51:41.000Z"
        assert photo.large.host == "s3.amazonaws.com"
        assert photo.large.url.startswith("https://s3.amazonaws.com/spypoint-production-account-")
        assert photo.large.headers[0].value == "image/jpeg"
        assert photo.hd is None

    def test_missing_blocks_use_defaults(self):
        camera = SpypointCamera.model_validate({"id": "bare"})
        assert camera.config.name == ""
        assert camera.status.batteries == []
        assert camera.subscriptions == []


class TestParseVendorDatetime:
    def test_zulu_timestamp(self):
        assert parse_vendor_datetime("2022-01-25T14:53:00.000Z") == datetime(
            2022, 1, 25, 14, 53, tzinfo=UTC
        )

    def test_naive_timestamp_is_utc(self):
        assert parse_vendor_datetime("2022-01-25T14:53:00").tzinfo is not None

    @pytest.mark.parametrize("value", ["", None, "not a date"])
    def test_unparseable_falls_back_to_now(self, value):
        before = datetime.now(UTC)
        parsed = parse_vendor_datetime(value)
        assert parsed >= before


class TestCameraMapping:
    """Camera.from_spypoint derived fields."""

    def test_identity_and_names(self, clover_field):
        camera = Camera.from_spypoint(clover_field)

        assert camera.camera_id == "5f145aaf173ca3001571df15"
        assert camera.name == "Clover Field"
        assert camera.location == "Clover Field"
        assert camera.type == CAMERA_TYPE_SPYPOINT
        assert camera.account_id == "5f145aae245c230017d3051e"
        assert camera.iccid == "865519047271252"
        assert camera.hardware_version == "V1.11.06 HW:1"
        assert camera.firmware_version == "EC21VDFAR02A10M4G"
        assert camera.created_timestamp == "2020-07-19T14:37:35.058Z"

    def test_subscription_fields(self, flex_camera):
        camera = Camera.from_spypoint(flex_camera)

        assert camera.registration_status == "active"
        assert camera.photo_count == 4
        assert camera.usage == {"stored_photos": 4, "photos": 4}

    def test_status_block(self, clover_field):
        camera = Camera.from_spypoint(clover_field)

        assert camera.last_updated_timestamp == datetime(2022, 1, 25, 14, 53, tzinfo=UTC)
        assert camera.status["battery_level"] == 82
        assert camera.status["signal"] == 2
        assert camera.status["memory"] == 2609.0
        assert camera.status["memory_limit"] == 29568.0
        assert camera.status["temperature"] == 39.0

    def test_gps_from_coordinates(self, flex_camera):
        camera = Camera.from_spypoint(flex_camera)

        assert camera.gps["latitude"] == "25.544241"
        assert camera.gps["longitude"] == "-80.439992"

    def test_gps_defaults_without_coordinates(self, clover_field):
        camera = Camera.from_spypoint(clover_field)

        assert camera.gps["latitude"] == "0.0"
        assert camera.gps["longitude"] == "0.0"

    def test_battery_defaults_to_zero(self):
        camera = Camera.from_spypoint(SpypointCamera.model_validate({"id": "c1"}))

        assert camera.status["battery_level"] == 0
        assert camera.registration_status == ""
        assert camera.photo_count == 0


class TestPictureMapping:
    def test_draft_fields(self, photo_batch):
        photo: SpypointPhoto = photo_batch.photos[0]

        picture = Picture.from_spypoint(photo)

        assert picture.id is None
        assert picture.photo_id == "669859240be0b2c3a252c536"
        assert picture.camera_id == "66985496c6eb10dbad5c51f6"
        assert picture.created == datetime(2024, 7, 17, 19, 51, 41, tzinfo=UTC)
        assert picture.date == picture.created
        assert picture.picture_date == "2024-07-17T23:52:04.697Z"
        assert picture.photo_time_stamp == "2024-07-17T19:51:41.000Z"
        assert picture.photo_url == photo.large.url
        assert picture.path == ""
        assert picture.is_favorite is False
        assert picture.weather_data is None

    def test_new_record_ids_are_unique(self):
        assert new_record_id() != new_record_id()
