"""Tests for patch building and the profile record store."""

import pytest

from modules.identity.errors import UpstreamError
from modules.identity.models import PatchOp, Record, RecordSnapshot
from modules.identity.records import build_patches

IDENTITY_ID = "us-east-1:identity-1"


def _snapshot(**records):
    return RecordSnapshot(
        records={
            key: Record(key=key, value=value, sync_count=count)
            for key, (value, count) in records.items()
        },
        session_token="session",
    )


@pytest.mark.unit
class TestBuildPatches:
    def test_create_skips_keys_with_live_value(self):
        snapshot = _snapshot(name=("Alice", 1))

        patches = build_patches(snapshot, create={"name": "Bob", "email": "b@test.com"})

        assert [(p.op, p.key, p.sync_count) for p in patches] == [
            (PatchOp.CREATE, "email", 0)
        ]

    def test_create_over_cleared_record_uses_its_sync_count(self):
        snapshot = _snapshot(name=(None, 3))

        patches = build_patches(snapshot, create={"name": "Bob"})

        assert patches[0].sync_count == 3
        assert patches[0].to_wire() == {
            "Op": "replace",
            "Key": "name",
            "SyncCount": 3,
            "Value": "Bob",
        }

    def test_replace_uses_observed_or_zero_sync_count(self):
        snapshot = _snapshot(password=("old", 2))

        patches = build_patches(snapshot, replace={"password": "new", "provider": None})

        assert [(p.key, p.sync_count) for p in patches] == [("password", 2), ("provider", 0)]
        assert "Value" not in patches[1].to_wire()

    def test_remove_skips_missing_and_cleared_keys(self):
        snapshot = _snapshot(reset=("abc", 4), token=(None, 2))

        patches = build_patches(snapshot, remove=["reset", "token", "missing"])

        assert [p.to_wire() for p in patches] == [
            {"Op": "remove", "Key": "reset", "SyncCount": 4}
        ]

    def test_no_changes_build_no_patches(self):
        assert build_patches(_snapshot()) == []


@pytest.mark.unit
class TestProfileRecordStore:
    @pytest.mark.asyncio
    async def test_create_replace_remove_lifecycle(self, records, fake_aws):
        await records.update_records(IDENTITY_ID, create={"name": "V1"})
        assert await records.get_records(IDENTITY_ID, ["name"]) == {"name": "V1"}

        await records.update_records(IDENTITY_ID, replace={"name": "V2"})
        assert await records.get_records(IDENTITY_ID, ["name"]) == {"name": "V2"}

        await records.update_records(IDENTITY_ID, remove=["name"])
        assert await records.get_records(IDENTITY_ID, ["name"]) == {}

    @pytest.mark.asyncio
    async def test_create_never_overwrites(self, records, fake_aws):
        await records.update_records(IDENTITY_ID, create={"name": "first"})
        await records.update_records(IDENTITY_ID, create={"name": "second"})

        assert fake_aws.sync.records(IDENTITY_ID) == {"name": "first"}

    @pytest.mark.asyncio
    async def test_get_records_filters_by_prefix(self, records, fake_aws):
        await records.update_records(
            IDENTITY_ID,
            replace={"profilegoogle": "{}", "profilestripe": "{}", "name": "Alice"},
        )

        result = await records.get_records(IDENTITY_ID, ["profile"])

        assert set(result) == {"profilegoogle", "profilestripe"}

    @pytest.mark.asyncio
    async def test_replace_with_none_clears_record(self, records, fake_aws):
        await records.update_records(IDENTITY_ID, replace={"provider": "google"})
        await records.update_records(IDENTITY_ID, replace={"provider": None})

        assert await records.get_records(IDENTITY_ID, [""]) == {}

    @pytest.mark.asyncio
    async def test_empty_update_skips_write(self, records, fake_aws):
        assert await records.update_records(IDENTITY_ID, remove=["missing"]) is True
        assert fake_aws.sync.update_calls == []

    @pytest.mark.asyncio
    async def test_batch_is_sent_in_one_call(self, records, fake_aws):
        await records.update_records(
            IDENTITY_ID, create={"name": "Alice"}, replace={"token": "t"}
        )

        assert len(fake_aws.sync.update_calls) == 1
        keys = [p["Key"] for p in fake_aws.sync.update_calls[0]["RecordPatches"]]
        assert keys == ["name", "token"]

    @pytest.mark.asyncio
    async def test_write_conflict_is_reported_as_success(self, records, fake_aws):
        fake_aws.sync.fail_next_update_with = "ResourceConflictException"

        assert await records.update_records(IDENTITY_ID, replace={"name": "x"}) is True
        assert fake_aws.sync.records(IDENTITY_ID) == {}

    @pytest.mark.asyncio
    async def test_other_failures_raise_upstream_error(self, records, fake_aws):
        fake_aws.sync.fail_next_update_with = "InvalidParameterException"

        with pytest.raises(UpstreamError):
            await records.update_records(IDENTITY_ID, replace={"name": "x"})
