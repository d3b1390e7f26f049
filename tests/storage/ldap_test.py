"""Tests for the directory client."""

from __future__ import annotations

import threading

import pytest

from paasldap.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    TransportError,
)
from paasldap.factory import Factory
from paasldap.models.directory import (
    GroupRecord,
    GroupWrite,
    UserRecord,
    UserWriteOptional,
    UserWriteRequired,
)
from paasldap.models.enums import DirectoryStatus, ErrorKind
from paasldap.storage.ldap import DirectoryClient

from ..support.constants import TEST_BASE_DN
from ..support.ldap import (
    ADMIN_PASSWORD,
    ADMIN_USER,
    SAMPLE_PASSWORD,
    SAMPLE_USER,
    MockDirectory,
)

PEOPLE_DN = f"ou=people,{TEST_BASE_DN}"
GROUPS_DN = f"ou=groups,{TEST_BASE_DN}"


def bound_client(
    factory: Factory, username: str, password: str
) -> DirectoryClient:
    client = factory.create_directory_client()
    client.bind(username, password)
    return client


def new_user(cn: str = "new") -> UserWriteRequired:
    return UserWriteRequired(
        cn=cn, sn="user", mail="newuser@test.paasldap", userpassword="new123"
    )


def test_dn(directory_client: DirectoryClient) -> None:
    assert directory_client.people_dn == PEOPLE_DN
    assert directory_client.groups_dn == GROUPS_DN
    assert directory_client.user_dn("foo") == f"uid=foo,{PEOPLE_DN}"
    assert directory_client.group_dn("bar") == f"cn=bar,{GROUPS_DN}"


def test_bind(factory: Factory, mock_ldap: MockDirectory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)
    assert ("bind", f"uid={ADMIN_USER},{PEOPLE_DN}") in mock_ldap.operations
    assert len(mock_ldap.connections) == 1
    client.close()

    client = factory.create_directory_client()
    client.connect()
    with pytest.raises(AuthenticationError) as excinfo:
        client.bind(ADMIN_USER, "wrong")
    assert excinfo.value.code == 49
    assert excinfo.value.name == "invalidCredentials"
    assert excinfo.value.kind == ErrorKind.authentication
    assert excinfo.value.status == DirectoryStatus.bad_request

    with pytest.raises(AuthenticationError):
        client.bind("nonexistent", ADMIN_PASSWORD)
    client.close()


def test_failed_bind_keeps_identity(factory: Factory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)
    with pytest.raises(AuthenticationError):
        client.bind(SAMPLE_USER, "wrong")

    # Still bound as the administrator, so creating a group works.
    client.add_group("stillbound", GroupWrite())
    assert client.get_group("stillbound").cn == "stillbound"
    client.close()


def test_get_all_users_anonymous(directory_client: DirectoryClient) -> None:
    users = directory_client.get_all_users()
    assert users == [
        UserRecord(
            dn=f"uid={ADMIN_USER},{PEOPLE_DN}",
            cn="admin",
            sn="user",
            mail="adminuser@test.paasldap",
            uid=ADMIN_USER,
            member_of=[
                f"cn={ADMIN_USER},{GROUPS_DN}",
                f"cn=admins,{GROUPS_DN}",
            ],
        ),
        UserRecord(
            dn=f"uid={SAMPLE_USER},{PEOPLE_DN}",
            cn="sample",
            sn="user",
            mail="sampleuser@test.paasldap",
            uid=SAMPLE_USER,
            member_of=[],
        ),
    ]


def test_get_user(directory_client: DirectoryClient) -> None:
    user = directory_client.get_user(SAMPLE_USER)
    assert user.dn == f"uid={SAMPLE_USER},{PEOPLE_DN}"
    assert user.cn == "sample"

    with pytest.raises(NotFoundError) as excinfo:
        directory_client.get_user("nonexistent")
    assert excinfo.value.code == 32
    assert excinfo.value.name == "noSuchObject"


def test_get_groups(directory_client: DirectoryClient) -> None:
    groups = directory_client.get_all_groups()
    assert [g.cn for g in groups] == [ADMIN_USER, "admins"]
    admin_dn = f"uid={ADMIN_USER},{PEOPLE_DN}"
    assert all(g.member == [admin_dn] for g in groups)

    group = directory_client.get_group("admins")
    assert group.dn == f"cn=admins,{GROUPS_DN}"
    assert group.members == [admin_dn]

    with pytest.raises(NotFoundError):
        directory_client.get_group("nonexistent")


def test_user_lifecycle(factory: Factory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)

    client.add_user("newuser", new_user())
    user = client.get_user("newuser")
    assert user == UserRecord(
        dn=f"uid=newuser,{PEOPLE_DN}",
        cn="new",
        sn="user",
        mail="newuser@test.paasldap",
        uid="newuser",
        member_of=[],
    )

    with pytest.raises(ConflictError) as excinfo:
        client.add_user("newuser", new_user())
    assert excinfo.value.code == 68
    assert excinfo.value.name == "entryAlreadyExists"

    client.del_user("newuser")
    with pytest.raises(NotFoundError):
        client.get_user("newuser")
    with pytest.raises(NotFoundError):
        client.del_user("newuser")
    client.close()


def test_new_user_can_bind(factory: Factory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)
    client.add_user("newuser", new_user())
    client.close()

    client = bound_client(factory, "newuser", "new123")
    assert client.get_user("newuser").cn == "new"
    client.close()


def test_add_user_validation(
    factory: Factory, mock_ldap: MockDirectory
) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)
    mock_ldap.operations.clear()

    incomplete = UserWriteRequired(
        cn="new", sn="user", mail="", userpassword="x"
    )
    with pytest.raises(InvalidRequestError) as excinfo:
        client.add_user("newuser", incomplete)
    assert excinfo.value.code == 53
    assert excinfo.value.name == "unwillingToPerform"
    assert excinfo.value.kind == ErrorKind.validation
    assert excinfo.value.message == (
        "Missing one of required fields: cn, sn, mail, userpassword"
    )
    assert mock_ldap.operations == []
    client.close()


def test_mod_user(factory: Factory, mock_ldap: MockDirectory) -> None:
    client = bound_client(factory, SAMPLE_USER, SAMPLE_PASSWORD)
    before = client.get_user(SAMPLE_USER)

    client.mod_user(SAMPLE_USER, UserWriteOptional(mail="x@test.paasldap"))
    after = client.get_user(SAMPLE_USER)
    assert after.mail == "x@test.paasldap"
    assert after.cn == before.cn
    assert after.sn == before.sn

    mock_ldap.operations.clear()
    with pytest.raises(InvalidRequestError) as excinfo:
        client.mod_user(SAMPLE_USER, UserWriteOptional())
    assert excinfo.value.code == 53
    assert excinfo.value.message == (
        "Requires one of fields: cn, sn, mail, userpassword"
    )
    assert mock_ldap.operations == []

    # Changing the password takes effect on the next bind.
    client.mod_user(SAMPLE_USER, UserWriteOptional(userpassword="changed"))
    client.close()
    client = bound_client(factory, SAMPLE_USER, "changed")
    client.close()
    with pytest.raises(AuthenticationError):
        bound_client(factory, SAMPLE_USER, SAMPLE_PASSWORD)


def test_unprivileged(factory: Factory) -> None:
    client = bound_client(factory, SAMPLE_USER, SAMPLE_PASSWORD)

    with pytest.raises(AuthorizationError) as excinfo:
        client.mod_user(ADMIN_USER, UserWriteOptional(cn="changed"))
    assert excinfo.value.code == 50
    assert excinfo.value.name == "insufficientAccessRights"
    assert excinfo.value.kind == ErrorKind.authorization

    with pytest.raises(AuthorizationError):
        client.del_user(ADMIN_USER)
    with pytest.raises(AuthorizationError):
        client.add_user("newuser", new_user())
    with pytest.raises(AuthorizationError):
        client.add_group("newgroup", GroupWrite())
    with pytest.raises(AuthorizationError):
        client.add_user_to_group(SAMPLE_USER, "admins")
    with pytest.raises(AuthorizationError):
        client.del_group("admins")
    client.close()


def test_anonymous_writes(directory_client: DirectoryClient) -> None:
    with pytest.raises(AuthenticationError) as excinfo:
        directory_client.add_user("newuser", new_user())
    assert excinfo.value.code == 8
    assert excinfo.value.name == "strongerAuthRequired"

    with pytest.raises(AuthenticationError):
        directory_client.mod_user(SAMPLE_USER, UserWriteOptional(cn="x"))
    with pytest.raises(AuthenticationError):
        directory_client.del_user(SAMPLE_USER)
    with pytest.raises(AuthenticationError):
        directory_client.add_group("newgroup", GroupWrite())
    with pytest.raises(AuthenticationError):
        directory_client.del_group("admins")


def test_admin_other_user(factory: Factory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)

    # Administrators may reset passwords but not rename other users.
    client.mod_user(SAMPLE_USER, UserWriteOptional(userpassword="reset"))
    with pytest.raises(AuthorizationError):
        client.mod_user(SAMPLE_USER, UserWriteOptional(cn="renamed"))
    assert client.get_user(SAMPLE_USER).cn == "sample"

    # But they may change their own entry.
    client.mod_user(ADMIN_USER, UserWriteOptional(cn="boss", sn="person"))
    user = client.get_user(ADMIN_USER)
    assert (user.cn, user.sn) == ("boss", "person")
    client.close()


def test_group_lifecycle(factory: Factory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)

    client.add_group("newgroup", GroupWrite())
    group = client.get_group("newgroup")
    assert group.cn == "newgroup"
    assert group.member == [""]
    assert group.members == []

    with pytest.raises(ConflictError):
        client.add_group("newgroup", GroupWrite())

    # Modifying a group always succeeds and changes nothing.
    client.mod_group("newgroup", GroupWrite())
    assert client.get_group("newgroup") == group
    client.mod_group("nonexistent", GroupWrite())

    client.del_group("newgroup")
    with pytest.raises(NotFoundError):
        client.get_group("newgroup")
    client.close()


def test_membership(factory: Factory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)
    sample_dn = client.user_dn(SAMPLE_USER)
    client.add_group("newgroup", GroupWrite())

    client.add_user_to_group(SAMPLE_USER, "newgroup")
    assert client.get_group("newgroup").members == [sample_dn]
    assert client.get_user(SAMPLE_USER).member_of == [
        client.group_dn("newgroup")
    ]

    client.del_user_from_group(SAMPLE_USER, "newgroup")
    group = client.get_group("newgroup")
    assert group.member == [""]
    assert group.members == []
    assert client.get_user(SAMPLE_USER).member_of == []

    with pytest.raises(NotFoundError):
        client.add_user_to_group(SAMPLE_USER, "nonexistent")
    client.close()


def test_delete_user_cleans_groups(factory: Factory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)
    client.add_user("newuser", new_user())
    client.add_group("newgroup", GroupWrite())
    client.add_user_to_group("newuser", "newgroup")

    client.del_user("newuser")
    assert client.get_group("newgroup").members == []
    client.close()


def test_unreachable(factory: Factory, mock_ldap: MockDirectory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)

    mock_ldap.reachable = False
    with pytest.raises(TransportError) as excinfo:
        client.get_all_users()
    assert excinfo.value.kind == ErrorKind.transport
    assert excinfo.value.status == DirectoryStatus.internal_error
    assert excinfo.value.status_code == 500

    other = factory.create_directory_client()
    with pytest.raises(TransportError) as excinfo:
        other.connect()
    assert excinfo.value.code == 91

    mock_ldap.reachable = True
    assert len(client.get_all_users()) == 2
    client.close()


def test_close(factory: Factory) -> None:
    client = bound_client(factory, ADMIN_USER, ADMIN_PASSWORD)
    client.close()
    client.close()
    with pytest.raises(TransportError):
        client.get_all_users()

    never_connected = factory.create_directory_client()
    never_connected.close()


def test_concurrent_operations(
    factory: Factory, mock_ldap: MockDirectory
) -> None:
    client = factory.create_directory_client()
    client.connect()
    groups: list[GroupRecord] = []
    other = threading.Thread(
        target=lambda: groups.extend(client.get_all_groups())
    )

    # Start a group search on the same client just before the user search
    # reads its entries, and give it a chance to overwrite them.
    def start_other() -> None:
        other.start()
        other.join(timeout=0.5)

    mock_ldap.response_hook = start_other
    users = client.get_all_users()
    other.join()

    assert [u.dn for u in users] == [
        f"uid={ADMIN_USER},{PEOPLE_DN}",
        f"uid={SAMPLE_USER},{PEOPLE_DN}",
    ]
    assert [u.uid for u in users] == [ADMIN_USER, SAMPLE_USER]
    assert [g.dn for g in groups] == [
        f"cn={ADMIN_USER},{GROUPS_DN}",
        f"cn=admins,{GROUPS_DN}",
    ]
    client.close()
