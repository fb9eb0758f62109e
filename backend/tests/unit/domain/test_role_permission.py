"""
Tests for the Role and Permission aggregates.
"""

import pytest

from rolegate.core.domain.result import ErrorType
from rolegate.modules.identity.domain.aggregates import Permission, Role
from rolegate.modules.identity.domain.enums import PermissionType
from rolegate.modules.identity.domain.events import (
    PermissionCreated,
    PermissionTypeChanged,
    RoleCreated,
    RolePermissionAdded,
    RolePermissionRemoved,
)
from rolegate.modules.identity.domain.value_objects import (
    PermissionId,
    PermissionName,
    RoleId,
)


def _permission(name: str = "Articles.Edit", system: bool = False) -> Permission:
    permission = Permission.create(
        PermissionName(name), f"{name} access", PermissionType.UPDATE, system
    ).value
    permission.clear_events()
    return permission


@pytest.mark.unit
class TestRole:
    """Test role behavior."""

    def test_create(self):
        role = Role.create("  Editor ", "Edits articles").value

        assert role.name == "Editor"
        assert role.normalized_name == "EDITOR"
        assert not role.is_system_defined
        assert isinstance(role.get_events()[0], RoleCreated)

    @pytest.mark.parametrize(
        "name,description,code",
        [
            ("", "desc", "Role.NameRequired"),
            ("A" * 257, "desc", "Role.NameTooLong"),
            ("Editor", " ", "Role.DescriptionRequired"),
        ],
    )
    def test_create_validation(self, name, description, code):
        result = Role.create(name, description)

        assert result.error.code == code
        assert result.error.type is ErrorType.VALIDATION

    def test_create_with_permissions_grants_them(self):
        edit = _permission("Articles.Edit")

        role = Role.create("Editor", "Edits", permissions=[edit, edit]).value

        assert role.permission_names == frozenset({"Articles.Edit"})
        assert [type(e) for e in role.get_events()] == [RoleCreated, RolePermissionAdded]

    def test_add_and_remove_permission(self):
        role = Role.create("Editor", "Edits").value
        role.clear_events()
        edit = _permission()

        assert role.add_permission(edit).is_success
        assert role.has_permission(edit.id)
        assert role.has_permission("Articles.Edit")
        assert role.has_permission(PermissionName("Articles.Edit"))
        assert role.permissions[0].granted_at is not None

        assert role.remove_permission(edit).is_success
        assert not role.has_permission(edit.id)
        assert [type(e) for e in role.get_events()] == [
            RolePermissionAdded,
            RolePermissionRemoved,
        ]

    def test_duplicate_grant_is_conflict(self):
        role = Role.create("Editor", "Edits").value
        edit = _permission()
        role.add_permission(edit)

        result = role.add_permission(edit)

        assert result.error.code == "Role.PermissionAlreadyGranted"
        assert result.error.type is ErrorType.CONFLICT
        assert len(role.permissions) == 1

    def test_missing_grant_is_not_found(self):
        result = Role.create("Editor", "Edits").value.remove_permission(_permission())

        assert result.error.code == "Role.PermissionNotGranted"
        assert result.error.type is ErrorType.NOT_FOUND

    def test_system_defined_role_is_immutable(self):
        edit = _permission()
        role = Role.create("Administrator", "Everything", True, [edit]).value
        role.clear_events()

        for result in (
            role.update_description("Changed"),
            role.add_permission(_permission("Articles.Publish")),
            role.remove_permission(edit),
        ):
            assert result.is_failure
            assert result.error.code == "Role.SystemDefined"
            assert result.error.type is ErrorType.FAILURE

        assert role.description == "Everything"
        assert role.permission_names == frozenset({"Articles.Edit"})
        assert not role.has_events()

    def test_matches_name_case_insensitive(self):
        role = Role.create("Editor", "Edits").value

        assert role.matches_name("editor ")
        assert not role.matches_name("Editors")

    def test_restore_has_no_events_and_no_grant_times(self):
        edit = _permission()

        role = Role.restore(RoleId.new(), "Editor", "Edits", False, [edit])

        assert not role.has_events()
        assert role.permissions[0].granted_at is None


@pytest.mark.unit
class TestPermission:
    """Test permission behavior."""

    def test_create(self):
        permission = Permission.create(
            PermissionName("Articles.Edit"), "Edit articles", PermissionType.UPDATE
        ).value

        assert permission.resource == "Articles"
        assert permission.action == "Edit"
        event = permission.get_events()[0]
        assert isinstance(event, PermissionCreated)
        assert event.permission_type == int(PermissionType.UPDATE)

    def test_create_requires_description(self):
        result = Permission.create(PermissionName("Articles.Edit"), "", PermissionType.READ)

        assert result.error.code == "Permission.DescriptionRequired"

    def test_update_type(self):
        permission = _permission()

        assert permission.update_type(PermissionType.MANAGE).is_success
        assert permission.permission_type is PermissionType.MANAGE
        assert isinstance(permission.get_events()[0], PermissionTypeChanged)

    def test_system_defined_permission_is_immutable(self):
        permission = _permission(system=True)

        assert permission.update_description("x").error.code == "Permission.SystemDefined"
        assert permission.update_type(PermissionType.READ).error.code == (
            "Permission.SystemDefined"
        )

    def test_standard_permissions(self):
        permissions = Permission.create_standard_permissions("Articles").value

        assert [p.name.value for p in permissions] == [
            "Articles.Create",
            "Articles.Read",
            "Articles.Update",
            "Articles.Delete",
        ]
        assert all(p.is_system_defined for p in permissions)
        assert permissions[0].description == "Create Articles"
        assert [p.permission_type for p in permissions] == [
            PermissionType.CREATE,
            PermissionType.READ,
            PermissionType.UPDATE,
            PermissionType.DELETE,
        ]
        assert len({p.id for p in permissions}) == 4

    @pytest.mark.parametrize("resource,code", [("", "Permission.ResourceRequired"), ("Bad Name", "PermissionName.Invalid")])
    def test_standard_permissions_invalid_resource(self, resource, code):
        assert Permission.create_standard_permissions(resource).error.code == code

    def test_action_name(self):
        assert PermissionType.FULL_CONTROL.action_name == "FullControl"

    def test_identifier_type(self):
        assert isinstance(_permission().id, PermissionId)
