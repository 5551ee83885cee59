"""Tests for project, asset and user operations."""

import base64
import json

import pytest

from slyft_cli.core.auth import read_credentials
from slyft_cli.core.client import APIError, TransportError, UnauthorizedError, UnexpectedStatusError, ValidationError
from slyft_cli.core.types import Asset, Project

from slyft_cli.selection import NotFoundError, OutOfRangeError

from tests.helpers import asset_payload, truncated_response

PROJECT = Project(id=3, name="demo")


class TestProjects:
    def test_list_filters_by_name_fragment(self, client, transport):
        transport.reply(200, [{"id": 1, "name": "Demo-one"}, {"id": 2, "name": "other"}, {"id": 3, "name": "demo"}])
        projects = client.projects.list("DEMO")
        assert [p.id for p in projects] == [1, 3]
        assert transport.calls == [("GET", "/v1/projects", None)]

    def test_list_without_name_keeps_all(self, client, transport):
        transport.reply(200, [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}])
        assert len(client.projects.list()) == 2

    def test_create(self, client, transport):
        transport.reply(201, {"id": 9, "name": "fresh"})
        project = client.projects.create(" fresh ")
        assert project.id == 9
        assert transport.calls == [("POST", "/v1/projects", {"project": {"name": "fresh"}})]

    def test_create_needs_a_name(self, client, transport):
        with pytest.raises(ValidationError):
            client.projects.create("  ")

    def test_get_unauthorized(self, client, transport):
        transport.reply(401, {"errors": ["nope"]})
        with pytest.raises(UnauthorizedError):
            client.projects.get(3)

    def test_choose_prompts_among_matches(self, client, transport):
        transport.reply(200, [{"id": 1, "name": "demo-a"}, {"id": 2, "name": "other"}, {"id": 3, "name": "demo-b"}])
        shown = []

        project = client.projects.choose("demo", "Which one: ", shown.append, read_choice=lambda _m: 2)

        assert project.id == 3
        assert [p.name for p in shown[0]] == ["demo-a", "demo-b"]

    def test_choose_without_match(self, client, transport):
        transport.reply(200, [{"id": 2, "name": "other"}])
        with pytest.raises(NotFoundError, match="No project"):
            client.projects.choose("demo", "Which one: ", lambda _records: None)

    def test_sub_resource_paths(self):
        assert PROJECT.endpoint == "/v1/projects/3"
        assert PROJECT.assets_url == "/v1/projects/3/assets"
        assert PROJECT.assetstore_url == "/v1/projects/3/assetstore"
        assert PROJECT.jobs_url == "/v1/projects/3/jobs"


class TestAssets:
    def test_upload_sends_data_url(self, client, transport, tmp_path):
        source = tmp_path / "hello.txt"
        source.write_bytes(b"hello")
        transport.reply(201, asset_payload(4, "hello.txt"))

        asset = client.assets.upload(source, PROJECT)

        assert asset.id == 4
        method, path, body = transport.calls[0]
        assert (method, path) == ("POST", "/v1/projects/3/assets")
        assert body["asset"]["name"] == "hello.txt"
        prefix, encoded = body["asset"]["asset"].split(",", 1)
        assert prefix == "data:text/plain;base64"
        assert base64.b64decode(encoded) == b"hello"

    def test_upload_unknown_type_is_octet_stream(self, client, transport, tmp_path):
        source = tmp_path / "schema.zzunknown"
        source.write_bytes(b"\x00\x01")
        transport.reply(201, asset_payload(5, "schema.zzunknown"))
        client.assets.upload(source, PROJECT)
        assert transport.calls[0][2]["asset"]["asset"].startswith("data:application/octet-stream;base64,")

    def test_upload_missing_file(self, client, transport, tmp_path):
        with pytest.raises(ValidationError):
            client.assets.upload(tmp_path / "absent.asn1", PROJECT)
        assert transport.calls == []

    def test_download_streams_body_to_file(self, client, transport, tmp_path):
        transport.reply(200, raw=b"MyModule DEFINITIONS ::= BEGIN END")

        target = client.assets.download("mod.asn1", PROJECT, tmp_path)

        assert target == tmp_path / "mod.asn1"
        assert target.read_bytes() == b"MyModule DEFINITIONS ::= BEGIN END"
        assert transport.calls == [("GET", "/v1/projects/3/assetstore", {"asset_name": "mod.asn1"})]

    def test_download_missing_asset(self, client, transport, tmp_path):
        transport.reply(404, {"error": "not found"})
        with pytest.raises(UnexpectedStatusError):
            client.assets.download("mod.asn1", PROJECT, tmp_path)
        assert not (tmp_path / "mod.asn1").exists()

    def test_download_truncated_body(self, client, transport, tmp_path):
        transport.queue(truncated_response())
        with pytest.raises(TransportError):
            client.assets.download("mod.asn1", PROJECT, tmp_path)

    def test_list_all_assets(self, client, transport):
        transport.reply(200, [asset_payload(1, "a"), asset_payload(2, "b", project_id=4)])
        assets = client.assets.list()
        assert [a.project_id for a in assets] == [3, 4]
        assert transport.calls[0][:2] == ("GET", "/v1/assets")

    @pytest.mark.parametrize("status", [200, 204])
    def test_delete(self, client, transport, status):
        transport.reply(status)
        asset = Asset.from_dict(asset_payload(4, "a"))
        assert client.assets.delete(asset)
        assert transport.calls == [("DELETE", "/v1/projects/3/assets/4", None)]

    def test_delete_rejected(self, client, transport):
        transport.reply(403)
        with pytest.raises(UnexpectedStatusError):
            client.assets.delete(Asset.from_dict(asset_payload(4, "a")))

    def test_choose_narrows_to_latest(self, client, transport):
        transport.reply(200, [asset_payload(i, f"a{i}") for i in range(1, 6)])
        shown = []

        asset = client.assets.choose(PROJECT, True, "Remove: ", shown.append, tail=2, read_choice=lambda _m: 1)

        assert asset.id == 4
        assert [a.id for a in shown[0]] == [4, 5]

    def test_choose_out_of_range(self, client, transport):
        transport.reply(200, [asset_payload(1, "a"), asset_payload(2, "b")])
        with pytest.raises(OutOfRangeError):
            client.assets.choose(None, True, "Remove: ", lambda _records: None, read_choice=lambda _m: 3)


class TestUsers:
    def test_login_stores_token_triple(self, client, transport, settings):
        transport.reply(
            200,
            {"data": {"email": "me@example.com"}},
            headers={"access-token": "tok", "client": "cli", "uid": "me@example.com"},
        )

        creds = client.users.login("me@example.com", "secret")

        assert creds.good_for_login()
        assert read_credentials(settings.credentials_path) == creds
        method, path, body = transport.calls[0]
        assert (method, path) == ("POST", "/v1/auth/sign_in")
        assert body == {"email": "me@example.com", "password": "secret"}
        stored = json.loads(settings.credentials_path.read_text())
        assert stored["access_token"] == "tok"

    def test_login_without_tokens(self, client, transport, settings):
        transport.reply(200, {})
        with pytest.raises(APIError):
            client.users.login("me@example.com", "secret")
        assert not settings.credentials_path.exists()

    def test_login_rejected(self, client, transport):
        transport.reply(401)
        with pytest.raises(UnauthorizedError):
            client.users.login("me@example.com", "wrong")

    def test_logout(self, client, transport, settings):
        transport.reply(200, headers={"access-token": "tok", "client": "cli", "uid": "u"})
        client.users.login("u", "p")
        assert client.users.logout()
        assert not client.users.logout()
