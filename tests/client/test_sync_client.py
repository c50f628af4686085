"""
Tests for the blocking client, routed through httpx.MockTransport.
"""

import json
import unittest

import httpx
from pydantic import ValidationError

from hubuum_client.client import (
    Authenticated,
    AuthenticatedSyncClient,
    ClassHandle,
    GroupHandle,
    Handle,
    NamespaceHandle,
    SyncClient,
    UserHandle,
    one_or_err,
)
from hubuum_client.core.classes import Credentials, GroupPermissionsResult, Token
from hubuum_client.core.endpoints import Endpoint
from hubuum_client.core.exceptions import (
    DeserializationError,
    FilterValidationError,
    HttpError,
    HubuumError,
    InvalidParamsError,
    InvalidTokenError,
    MissingIdentifierError,
    NotFound,
    QuerySerializationError,
    TooManyResults,
    TransportError,
    UnsupportedOperationError,
)
from hubuum_client.core.filters import Operator
from hubuum_client.resources import Class, ClassGet, ClassPatch, ClassPost, Group, Object, User
from hubuum_client.testing import MockHubuum

BASE = "https://api.example.com"
NOW = "2024-01-01T10:00:00"
TOKEN = "s3cr3t-token"

NAMESPACE_JSON = {
    "id": 3, "name": "infra", "description": "Infrastructure",
    "created_at": NOW, "updated_at": NOW,
}
CLASS_JSON = {
    "id": 1, "name": "Servers", "description": "All servers",
    "namespace": NAMESPACE_JSON, "json_schema": None, "validate_schema": False,
    "created_at": NOW, "updated_at": NOW,
}
USER_JSON = {
    "id": 7, "username": "alice", "email": "alice@example.com",
    "created_at": NOW, "updated_at": NOW,
}
GROUP_JSON = {
    "id": 2, "groupname": "admins", "description": "Administrators",
    "created_at": NOW, "updated_at": NOW,
}
OBJECT_JSON = {
    "id": 11, "name": "web01", "namespace_id": 3, "hubuum_class_id": 1,
    "description": "Web server", "data": {"ip": "10.0.0.1"},
    "created_at": NOW, "updated_at": NOW,
}


def authenticated(server: MockHubuum) -> AuthenticatedSyncClient:
    server.add("GET", "/api/v0/auth/validate")
    client = SyncClient(BASE, http_client=server.sync_client())
    return client.login_with_token(TOKEN)


class LoginTests(unittest.TestCase):
    def setUp(self):
        self.server = MockHubuum()
        self.client = SyncClient(BASE, http_client=self.server.sync_client())

    def test_login(self):
        self.server.add("POST", "/api/v0/auth/login", json={"token": TOKEN})
        hubuum = self.client.login(Credentials(username="alice", password="pw"))

        self.assertIsInstance(hubuum, AuthenticatedSyncClient)
        self.assertEqual(hubuum.get_token(), TOKEN)
        self.assertEqual(hubuum.state, Authenticated(TOKEN))
        request = self.server.last_request
        self.assertEqual(str(request.url), f"{BASE}/api/v0/auth/login")
        self.assertEqual(json.loads(request.content), {"username": "alice", "password": "pw"})
        self.assertNotIn("Authorization", request.headers)

    def test_login_accepts_mapping(self):
        self.server.add("POST", "/api/v0/auth/login", json={"token": TOKEN})
        hubuum = self.client.login({"username": "alice", "password": "pw"})
        self.assertEqual(hubuum.token, TOKEN)

    def test_login_rejected(self):
        self.server.add(
            "POST", "/api/v0/auth/login", json={"message": "Invalid credentials"}, status_code=401
        )
        with self.assertRaises(HttpError) as ctx:
            self.client.login(Credentials(username="alice", password="wrong"))
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.message, "Invalid credentials")

    def test_login_with_incomplete_credentials(self):
        with self.assertRaises(InvalidParamsError):
            self.client.login({"username": "alice"})
        self.assertEqual(self.server.requests, [])

    def test_login_bad_token_body(self):
        self.server.add("POST", "/api/v0/auth/login", json={"unexpected": True})
        with self.assertRaises(DeserializationError):
            self.client.login(Credentials(username="alice", password="pw"))

    def test_login_with_token(self):
        self.server.add("GET", "/api/v0/auth/validate")
        hubuum = self.client.login_with_token(Token(token=TOKEN))
        self.assertEqual(hubuum.token, TOKEN)
        self.assertEqual(self.server.last_request.headers["Authorization"], f"Bearer {TOKEN}")

    def test_login_with_invalid_token(self):
        self.server.add("GET", "/api/v0/auth/validate", json={"message": "nope"}, status_code=401)
        with self.assertRaises(InvalidTokenError) as ctx:
            self.client.login_with_token("expired")
        self.assertEqual(str(ctx.exception), "Invalid token.")

    def test_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        self.server.add_callback("POST", "/api/v0/auth/login", refuse)
        with self.assertRaises(TransportError) as ctx:
            self.client.login(Credentials(username="alice", password="pw"))
        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)

    def test_unauthenticated_client_stays_usable(self):
        self.server.add("POST", "/api/v0/auth/login", json={"token": TOKEN})
        first = self.client.login(Credentials(username="alice", password="pw"))
        second = self.client.login(Credentials(username="bob", password="pw"))
        self.assertIs(first.http_client, second.http_client)

    def test_token_not_in_repr(self):
        self.assertNotIn(TOKEN, repr(Authenticated(TOKEN)))
        self.assertNotIn("pw", repr(Credentials(username="alice", password="pw")))

    def test_context_manager_closes_pool(self):
        with SyncClient(BASE, http_client=self.server.sync_client()) as client:
            pass
        self.assertTrue(client.http_client.is_closed)


class RequestTests(unittest.TestCase):
    def setUp(self):
        self.server = MockHubuum()
        self.hubuum = authenticated(self.server)

    def test_find_by_name(self):
        self.server.add("GET", "/api/v1/classes/", json=[CLASS_JSON])
        classes = self.hubuum.classes().find().add_filter("name", Operator.EQUALS, "Servers").execute()

        request = self.server.last_request
        self.assertEqual(str(request.url), f"{BASE}/api/v1/classes/?name__equals=Servers")
        self.assertEqual(request.headers["Authorization"], f"Bearer {TOKEN}")
        self.assertEqual(len(classes), 1)
        self.assertIsInstance(classes[0], Class)
        self.assertEqual(classes[0].namespace.name, "infra")

    def test_get_without_filters_has_no_query(self):
        self.server.add("GET", "/api/v1/iam/users/", json=[USER_JSON])
        self.hubuum.users().find().execute()
        self.assertEqual(str(self.server.last_request.url), f"{BASE}/api/v1/iam/users/")

    def test_builder_is_immutable(self):
        base = self.hubuum.classes().find().add_filter_equals("namespace_id", 3)
        narrowed = base.add_filter("name", "not_icontains", "test")
        self.assertEqual(len(base.filters), 1)
        self.assertEqual(len(narrowed.filters), 2)

    def test_builder_helpers(self):
        self.server.add("GET", "/api/v1/iam/users/", json=[USER_JSON])
        self.hubuum.users().find().add_filter_id(7).add_filter_name_exact("alice").execute()
        self.assertEqual(
            self.server.last_request.url.query, b"id__equals=7&username__equals=alice"
        )

    def test_checked_filter(self):
        builder = self.hubuum.classes().find().add_checked_filter("name", Operator.ICONTAINS, "srv")
        self.assertEqual(len(builder.filters), 1)
        with self.assertRaises(FilterValidationError):
            self.hubuum.classes().find().add_checked_filter("name", Operator.GT, 3)

    def test_filter_with_get_params(self):
        self.server.add("GET", "/api/v1/classes/", json=[CLASS_JSON])
        self.hubuum.classes().filter(ClassGet(name="Servers", namespace_id=3))
        self.assertEqual(
            self.server.last_request.url.query, b"name__equals=Servers&namespace_id__equals=3"
        )
        self.hubuum.classes().filter(name="Servers")
        self.assertEqual(self.server.last_request.url.query, b"name__equals=Servers")

    def test_execute_expecting_single_result(self):
        self.server.add("GET", "/api/v1/classes/", json=[])
        with self.assertRaises(NotFound) as ctx:
            self.hubuum.classes().find().add_filter_name_exact("Nope").execute_expecting_single_result()
        self.assertEqual(str(ctx.exception), "Empty result: Class not found")

        self.server.add("GET", "/api/v1/classes/", json=[CLASS_JSON, CLASS_JSON])
        with self.assertRaises(TooManyResults) as ctx:
            self.hubuum.classes().filter_expecting_single_result()
        self.assertIn("Type: Class, Count: 2 (expected 1)", str(ctx.exception))

    def test_create(self):
        self.server.add("POST", "/api/v1/classes/", json=CLASS_JSON, status_code=201)
        created = self.hubuum.classes().create(
            ClassPost(name="Servers", description="All servers", namespace_id=3)
        )
        self.assertEqual(created.id, 1)
        self.assertEqual(
            json.loads(self.server.last_request.content),
            {"name": "Servers", "description": "All servers", "namespace_id": 3},
        )

    def test_create_from_mapping(self):
        self.server.add("POST", "/api/v1/iam/users/", json=USER_JSON, status_code=201)
        self.hubuum.users().create({"username": "alice", "password": "pw"})
        self.assertEqual(
            json.loads(self.server.last_request.content), {"username": "alice", "password": "pw"}
        )

    def test_request_logging_redacts_passwords(self):
        self.server.add("POST", "/api/v1/iam/users/", json=USER_JSON, status_code=201)
        with self.assertLogs("hubuum_client.client.base", level="DEBUG") as logs:
            self.hubuum.users().create({"username": "alice", "password": "pw"})
        output = "\n".join(logs.output)
        self.assertIn(f"POST {BASE}/api/v1/iam/users/", output)
        self.assertNotIn("'pw'", output)

    def test_update(self):
        self.server.add("PATCH", "/api/v1/classes/1", json={**CLASS_JSON, "description": "new"})
        updated = self.hubuum.classes().update(1, {"description": "new"})
        self.assertEqual(updated.description, "new")
        self.assertEqual(json.loads(self.server.last_request.content), {"description": "new"})

    def test_patch_without_id_sends_nothing(self):
        with self.assertRaises(MissingIdentifierError):
            self.hubuum.patch(Class, None, {"description": "x"})
        # only the token validation went out
        self.assertEqual(len(self.server.requests), 1)

    def test_delete(self):
        self.server.add("DELETE", "/api/v1/classes/1", status_code=204)
        self.assertIsNone(self.hubuum.classes().delete(1))
        self.assertEqual(self.server.last_request.content, b"")

    def test_delete_with_body(self):
        self.server.add("DELETE", "/api/v1/classes/1", json={"deleted": True})
        with self.assertRaises(DeserializationError) as ctx:
            self.hubuum.classes().delete(1)
        self.assertEqual(ctx.exception.raw, '{"deleted": true}')

    def test_delete_without_id(self):
        with self.assertRaises(MissingIdentifierError):
            self.hubuum.delete(Class, None)

    def test_unsupported_method(self):
        with self.assertRaises(UnsupportedOperationError):
            self.hubuum.request("PUT", Class, body={})
        with self.assertRaises(UnsupportedOperationError):
            self.hubuum.request("TRACE", Class)

    def test_missing_url_parameter(self):
        with self.assertRaises(MissingIdentifierError):
            self.hubuum.get(Object)
        self.assertEqual(len(self.server.requests), 1)

    def test_http_error_messages(self):
        self.server.add("GET", "/api/v1/classes/", json={"message": "Forbidden"}, status_code=403)
        with self.assertRaises(HttpError) as ctx:
            self.hubuum.classes().find().execute()
        self.assertEqual(str(ctx.exception), "HTTP error 403: Forbidden")

        self.server.add("GET", "/api/v1/classes/", json={"error": 1}, status_code=500)
        with self.assertRaises(HttpError) as ctx:
            self.hubuum.classes().find().execute()
        self.assertEqual(ctx.exception.message, "Error without message.")

        self.server.add("GET", "/api/v1/classes/", text="Bad gateway", status_code=502)
        with self.assertRaises(HttpError) as ctx:
            self.hubuum.classes().find().execute()
        self.assertEqual(ctx.exception.message, "Bad gateway")

    def test_invalid_filter_params_are_hubuum_errors(self):
        with self.assertRaises(InvalidParamsError) as ctx:
            self.hubuum.classes().filter(bogus=1)
        self.assertIsInstance(ctx.exception, HubuumError)
        self.assertIsInstance(ctx.exception.__cause__, ValidationError)
        self.assertEqual(len(self.server.requests), 1)

    def test_wrong_shape_instance_is_a_hubuum_error(self):
        with self.assertRaises(InvalidParamsError) as ctx:
            self.hubuum.classes().create(ClassPatch(name="x"))
        self.assertIn("Expected ClassPost", str(ctx.exception))
        with self.assertRaises(HubuumError):
            self.hubuum.classes().update(1, ["name", "x"])
        self.assertEqual(len(self.server.requests), 1)

    def test_incomplete_create_payload(self):
        with self.assertRaises(InvalidParamsError):
            self.hubuum.users().create({"username": "alice"})

    def test_none_filter_value(self):
        with self.assertRaises(QuerySerializationError):
            self.hubuum.users().find().add_filter_equals("email", None).execute()
        self.assertEqual(len(self.server.requests), 1)

    def test_unparseable_body(self):
        self.server.add("GET", "/api/v1/classes/", json=[{"id": "not-a-class"}])
        with self.assertRaises(DeserializationError) as ctx:
            self.hubuum.classes().find().execute()
        self.assertEqual(ctx.exception.raw, '[{"id": "not-a-class"}]')

    def test_empty_body_is_not_found(self):
        self.server.add("GET", "/api/v1/classes/")
        with self.assertRaises(NotFound):
            self.hubuum.classes().find().execute()

    def test_search(self):
        self.server.add("GET", "/api/v1/iam/groups/", json=[GROUP_JSON])
        groups = self.hubuum.search(Group)
        self.assertEqual(groups[0].groupname, "admins")

    def test_objects_are_nested_under_their_class(self):
        self.server.add("GET", "/api/v1/classes/1/", json=[OBJECT_JSON])
        objects = self.hubuum.objects(1).find().add_filter_name_exact("web01").execute()
        self.assertEqual(objects[0].data, {"ip": "10.0.0.1"})
        self.assertEqual(
            str(self.server.last_request.url), f"{BASE}/api/v1/classes/1/?name__equals=web01"
        )

    def test_clone_shares_pool(self):
        clone = self.hubuum.clone()
        self.assertIsInstance(clone, AuthenticatedSyncClient)
        self.assertEqual(clone.token, TOKEN)
        self.assertIs(clone.http_client, self.hubuum.http_client)


class OneOrErrTests(unittest.TestCase):
    def test_one(self):
        self.assertEqual(one_or_err([1], "Thing"), 1)

    def test_none(self):
        with self.assertRaises(NotFound) as ctx:
            one_or_err([], "Thing")
        self.assertEqual(ctx.exception.detail.message, "Thing not found")

    def test_many(self):
        with self.assertRaises(TooManyResults) as ctx:
            one_or_err([1, 2, 3], "Thing")
        self.assertEqual(ctx.exception.detail.message, "Type: Thing, Count: 3 (expected 1)")


class HandleTests(unittest.TestCase):
    def setUp(self):
        self.server = MockHubuum()
        self.hubuum = authenticated(self.server)

    def test_select(self):
        self.server.add("GET", "/api/v1/classes/", json=[CLASS_JSON])
        handle = self.hubuum.classes().select(1)
        self.assertIsInstance(handle, ClassHandle)
        self.assertEqual(handle.id, 1)
        self.assertIs(handle.client, self.hubuum)
        self.assertEqual(str(handle), "Servers")
        self.assertEqual(self.server.last_request.url.query, b"id__equals=1")

    def test_select_by_name_uses_name_field(self):
        self.server.add("GET", "/api/v1/iam/users/", json=[USER_JSON])
        handle = self.hubuum.users().select_by_name("alice")
        self.assertIsInstance(handle, UserHandle)
        self.assertEqual(self.server.last_request.url.query, b"username__equals=alice")

    def test_generic_handle(self):
        self.server.add("GET", "/api/v1/classes/1/", json=[OBJECT_JSON])
        handle = self.hubuum.objects(1).select(11)
        self.assertIs(type(handle), Handle)

    def test_class_objects(self):
        self.server.add("GET", "/api/v1/classes/", json=[CLASS_JSON])
        self.server.add("GET", "/api/v1/classes/1/", json=[OBJECT_JSON])
        handle = self.hubuum.classes().select_by_name("Servers")

        objects = handle.objects()
        self.assertIsInstance(objects[0], Object)
        web01 = handle.object_by_name("web01")
        self.assertEqual(web01.name, "web01")
        self.assertEqual(handle.object_collection().url_params, {"class_id": "1"})

    def test_handle_update_and_delete(self):
        self.server.add("GET", "/api/v1/classes/1/", json=[OBJECT_JSON])
        self.server.add("PATCH", "/api/v1/classes/1/11", json={**OBJECT_JSON, "name": "web02"})
        self.server.add("DELETE", "/api/v1/classes/1/11")
        handle = self.hubuum.objects(1).select(11)

        updated = handle.update({"name": "web02"})
        self.assertEqual(updated.resource.name, "web02")
        self.assertIsNone(updated.delete())
        self.assertEqual(self.server.last_request.method, "DELETE")

    def test_group_members(self):
        self.server.add("GET", "/api/v1/iam/groups/", json=[GROUP_JSON])
        self.server.add("GET", "/api/v1/iam/groups/2/members", json=[USER_JSON])
        self.server.add("POST", "/api/v1/iam/groups/2/members/7", status_code=204)
        self.server.add("DELETE", "/api/v1/iam/groups/2/members/7", status_code=204)
        group = self.hubuum.groups().select_by_name("admins")
        self.assertIsInstance(group, GroupHandle)

        members = group.members()
        self.assertIsInstance(members[0], User)
        group.add_member(members[0])
        self.assertEqual(self.server.last_request.method, "POST")
        group.remove_member(7)
        self.assertEqual(self.server.last_request.url.path, "/api/v1/iam/groups/2/members/7")

    def test_namespace_group_permissions(self):
        permission = {
            "id": 1, "namespace_id": 3, "group_id": 2,
            "created_at": NOW, "updated_at": NOW,
        }
        for flag in GroupPermissionsResult.model_fields["permission"].annotation.model_fields:
            if flag.startswith("has_"):
                permission[flag] = flag == "has_read_namespace"
        self.server.add("GET", "/api/v1/namespaces/", json=[NAMESPACE_JSON])
        self.server.add(
            "GET", "/api/v1/namespaces/3/permissions",
            json=[{"group": GROUP_JSON, "permission": permission}],
        )
        namespace = self.hubuum.namespaces().select(3)
        self.assertIsInstance(namespace, NamespaceHandle)

        (result,) = namespace.group_permissions()
        self.assertEqual(result.group.groupname, "admins")
        self.assertEqual(result.permission.granted(), ["read_namespace"])

    def test_user_groups(self):
        self.server.add("GET", "/api/v1/iam/users/", json=[USER_JSON])
        self.server.add("GET", "/api/v1/iam/users/7/groups", json=[GROUP_JSON])
        user = self.hubuum.users().select(7)
        groups = user.groups()
        self.assertEqual([str(g) for g in groups], ["2"])
        self.assertEqual(groups[0].groupname, "admins")

    def test_request_with_endpoint(self):
        self.server.add("GET", "/api/v1/iam/groups/2/members", json=[])
        result = self.hubuum.request(
            "get", Endpoint.GROUP_MEMBERS, url_params={"group_id": 2}, output=list
        )
        self.assertEqual(result, [])
