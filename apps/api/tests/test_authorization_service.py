"""
Tests for AuthorizationService.

Covers the role tier table, org scoping, personal-org collapse, and the
linked AGENT customer exception.
"""

import pytest

from app.core.roles import AccountType, EffectiveOrgRole as R, MessageChannel, OrgType
from app.services.authorization_service import authorization_service as authz

from conftest import OTHER_ORG_ID, OTHER_USER_ID, USER_ID, make_ctx, make_project, make_user


ALL_ROLES = list(R)


# =============================================================================
# Org-level permissions
# =============================================================================


@pytest.mark.parametrize(
    "role,expected",
    [
        (R.OWNER, True),
        (R.ADMIN, True),
        (R.PROJECT_MANAGER, False),
        (R.TECHNICIAN, False),
        (R.EDITOR, False),
        (R.NONE, False),
    ],
)
def test_can_manage_customers_excludes_project_manager(role, expected):
    assert authz.can_manage_customers(make_ctx(role), make_user()) is expected


@pytest.mark.parametrize(
    "role,expected",
    [
        (R.OWNER, True),
        (R.ADMIN, True),
        (R.PROJECT_MANAGER, True),
        (R.TECHNICIAN, False),
        (R.EDITOR, False),
        (R.NONE, False),
    ],
)
def test_manager_tier_org_permissions(role, expected):
    ctx = make_ctx(role)
    user = make_user()
    assert authz.can_view_customers(ctx, user) is expected
    assert authz.can_view_inquiries(ctx, user) is expected
    assert authz.can_convert_inquiry(ctx, user) is expected
    assert authz.can_create_order(ctx, user) is expected


@pytest.mark.parametrize("role", [R.PROJECT_MANAGER, R.TECHNICIAN, R.EDITOR])
def test_org_settings_and_team_members_require_admin(role):
    ctx = make_ctx(role)
    assert not authz.can_manage_org_settings(ctx, make_user())
    assert not authz.can_manage_team_members(ctx, make_user())
    assert authz.can_manage_org_settings(make_ctx(R.ADMIN), make_user())


def test_org_permissions_deny_missing_context():
    assert not authz.can_create_order(None, make_user())
    assert not authz.can_view_customers(make_ctx(None), make_user())
    assert not authz.is_admin(None)


def test_get_org_permissions_for_project_manager():
    perms = authz.get_org_permissions(make_ctx(R.PROJECT_MANAGER), make_user())

    assert perms.effective_role == "PROJECT_MANAGER"
    assert not perms.is_admin
    assert not perms.can_manage_customers
    assert perms.can_view_customers
    assert perms.can_create_order


def test_get_org_permissions_without_context():
    perms = authz.get_org_permissions(None, None)

    assert perms.effective_role == "NONE"
    assert not any(
        [
            perms.is_admin,
            perms.can_manage_org_settings,
            perms.can_manage_team_members,
            perms.can_manage_customers,
            perms.can_view_customers,
            perms.can_view_inquiries,
            perms.can_convert_inquiry,
            perms.can_create_order,
        ]
    )


@pytest.mark.parametrize(
    "org_type,expected",
    [(OrgType.TEAM, True), (OrgType.COMPANY, True), (OrgType.PERSONAL, False)],
)
def test_can_create_organization(org_type, expected):
    assert authz.can_create_organization(make_user(), org_type) is expected


def test_can_create_organization_requires_user():
    assert not authz.can_create_organization(None, OrgType.TEAM)


def test_has_org_role_is_a_raw_check():
    ctx = make_ctx(R.PROJECT_MANAGER)
    assert authz.has_org_role(ctx, [R.PROJECT_MANAGER])
    assert not authz.has_org_role(ctx, [R.OWNER, R.ADMIN])
    assert not authz.has_org_role(make_ctx(R.NONE), [R.NONE])
    assert not authz.has_org_role(None, ALL_ROLES)


# =============================================================================
# Project visibility and editing
# =============================================================================


@pytest.mark.parametrize("role", [R.OWNER, R.ADMIN, R.PROJECT_MANAGER])
def test_managers_view_every_project_in_org(role):
    project = make_project(technician_id=OTHER_USER_ID)
    assert authz.can_view_project(make_ctx(role), project, make_user())


@pytest.mark.parametrize("role,field", [(R.TECHNICIAN, "technician_id"), (R.EDITOR, "editor_id")])
def test_assignees_view_only_their_own_projects(role, field):
    ctx = make_ctx(role)
    user = make_user()

    assert authz.can_view_project(ctx, make_project(**{field: USER_ID}), user)
    assert not authz.can_view_project(ctx, make_project(**{field: OTHER_USER_ID}), user)
    assert not authz.can_view_project(ctx, make_project(), user)


def test_technician_assigned_as_editor_does_not_count():
    project = make_project(editor_id=USER_ID)
    assert not authz.can_view_project(make_ctx(R.TECHNICIAN), project, make_user())


@pytest.mark.parametrize("role", ALL_ROLES)
def test_cross_org_project_is_always_denied(role):
    project = make_project(
        org_id=OTHER_ORG_ID,
        technician_id=USER_ID,
        editor_id=USER_ID,
        project_manager_id=USER_ID,
    )
    ctx = make_ctx(role)
    user = make_user()

    assert not authz.can_view_project(ctx, project, user)
    assert not authz.can_edit_project(ctx, project, user)
    assert not authz.can_delete_project(ctx, project, user)
    assert not authz.can_upload_media(ctx, project, user)
    assert not authz.can_read_team_chat(ctx, project, user)
    assert not authz.can_write_customer_chat(ctx, project, user)


def test_project_manager_edits_only_managed_projects():
    ctx = make_ctx(R.PROJECT_MANAGER)
    user = make_user()

    assert authz.can_edit_project(ctx, make_project(project_manager_id=USER_ID), user)
    assert not authz.can_edit_project(ctx, make_project(project_manager_id=OTHER_USER_ID), user)
    assert not authz.can_edit_project(ctx, make_project(), user)


@pytest.mark.parametrize("role", [R.OWNER, R.ADMIN])
def test_admins_edit_any_project_in_org(role):
    assert authz.can_edit_project(make_ctx(role), make_project(), make_user())


@pytest.mark.parametrize("role", [R.TECHNICIAN, R.EDITOR])
def test_assignees_never_edit(role):
    project = make_project(technician_id=USER_ID, editor_id=USER_ID, project_manager_id=USER_ID)
    assert not authz.can_edit_project(make_ctx(role), project, make_user())


def test_project_manager_never_deletes_or_changes_customer():
    ctx = make_ctx(R.PROJECT_MANAGER)
    project = make_project(project_manager_id=USER_ID)

    assert not authz.can_delete_project(ctx, project, make_user())
    assert not authz.can_change_project_customer(ctx, project, make_user())
    assert authz.can_delete_project(make_ctx(R.ADMIN), project)
    assert authz.can_change_project_customer(make_ctx(R.OWNER), project)


def test_manage_project_is_admin_only_even_for_assigned_pm():
    project = make_project(project_manager_id=USER_ID)

    assert not authz.can_manage_project(make_ctx(R.PROJECT_MANAGER), project, make_user())
    assert authz.can_edit_project(make_ctx(R.PROJECT_MANAGER), project, make_user())
    assert authz.can_manage_project(make_ctx(R.ADMIN), project)


@pytest.mark.parametrize("role,field", [(R.TECHNICIAN, "technician_id"), (R.EDITOR, "editor_id")])
def test_assignee_uploads_media_and_updates_own_work(role, field):
    ctx = make_ctx(role)
    user = make_user()
    assigned = make_project(**{field: USER_ID})
    unassigned = make_project(**{field: OTHER_USER_ID})

    assert authz.can_upload_media(ctx, assigned, user)
    assert authz.can_update_own_work_on_project(ctx, assigned, user)
    assert not authz.can_upload_media(ctx, unassigned, user)
    assert not authz.can_update_own_work_on_project(ctx, unassigned, user)


def test_unassigned_project_manager_cannot_upload_media():
    ctx = make_ctx(R.PROJECT_MANAGER)
    assert not authz.can_upload_media(ctx, make_project(project_manager_id=OTHER_USER_ID), make_user())
    assert authz.can_upload_media(ctx, make_project(project_manager_id=USER_ID), make_user())


def test_missing_project_or_user_is_denied(owner_ctx):
    assert not authz.can_view_project(owner_ctx, None, make_user())
    assert not authz.can_edit_project(owner_ctx, None, make_user())
    assert not authz.is_assigned_technician(make_project(technician_id=USER_ID), None)
    assert not authz.is_assigned_project_manager(None, make_user())


# =============================================================================
# Personal orgs
# =============================================================================


def test_personal_owner_has_full_access_in_personal_org():
    ctx = make_ctx(R.PERSONAL_OWNER, is_personal_org=True)
    project = make_project()
    user = make_user()

    perms = authz.get_project_permissions(ctx, project, user)
    assert perms.can_view_project
    assert perms.can_edit_project
    assert perms.can_delete_project
    assert perms.can_change_customer
    assert perms.can_upload_media
    assert perms.can_read_customer_chat
    assert perms.can_write_customer_chat
    assert authz.can_manage_project(ctx, project)
    assert authz.can_manage_org_settings(ctx, user)
    assert authz.is_admin(ctx)


@pytest.mark.parametrize("role", [R.OWNER, R.ADMIN, R.PROJECT_MANAGER, R.TECHNICIAN, R.EDITOR])
def test_other_roles_in_personal_org_are_denied(role):
    ctx = make_ctx(role, is_personal_org=True)
    project = make_project(technician_id=USER_ID, editor_id=USER_ID, project_manager_id=USER_ID)
    user = make_user()

    assert not authz.can_view_project(ctx, project, user)
    assert not authz.can_edit_project(ctx, project, user)
    assert not authz.can_upload_media(ctx, project, user)
    assert not authz.can_update_own_work_on_project(ctx, project, user)
    assert not authz.can_read_team_chat(ctx, project, user)
    assert not authz.can_create_order(ctx, user)
    assert not authz.is_admin(ctx)


# =============================================================================
# Messaging
# =============================================================================


def test_technician_team_chat_follows_assignment():
    ctx = make_ctx(R.TECHNICIAN)
    user = make_user()

    assert authz.can_read_team_chat(ctx, make_project(technician_id=USER_ID), user)
    assert authz.can_write_team_chat(ctx, make_project(technician_id=USER_ID), user)
    assert not authz.can_read_team_chat(ctx, make_project(technician_id=OTHER_USER_ID), user)


@pytest.mark.parametrize("role", [R.TECHNICIAN, R.EDITOR])
def test_customer_chat_hidden_from_assignees(role):
    ctx = make_ctx(role)
    project = make_project(technician_id=USER_ID, editor_id=USER_ID)

    assert not authz.can_read_customer_chat(ctx, project, make_user())
    assert not authz.can_write_customer_chat(ctx, project, make_user())


def test_project_manager_reads_all_but_writes_only_managed_customer_chat():
    ctx = make_ctx(R.PROJECT_MANAGER)
    user = make_user()
    managed = make_project(project_manager_id=USER_ID)
    other = make_project(project_manager_id=OTHER_USER_ID)

    assert authz.can_read_customer_chat(ctx, other, user)
    assert not authz.can_write_customer_chat(ctx, other, user)
    assert authz.can_write_customer_chat(ctx, managed, user)


def test_post_message_dispatches_by_channel():
    ctx = make_ctx(R.PROJECT_MANAGER)
    user = make_user()
    project = make_project(project_manager_id=OTHER_USER_ID)

    assert authz.can_post_message(ctx, project, MessageChannel.TEAM, user)
    assert not authz.can_post_message(ctx, project, MessageChannel.CUSTOMER, user)


def test_post_message_unknown_channel_is_team():
    ctx = make_ctx(R.TECHNICIAN)
    user = make_user()
    project = make_project(technician_id=USER_ID)

    assert authz.can_post_message(ctx, project, "announcements", user)
    assert not authz.can_post_message(ctx, project, "customer", user)


# =============================================================================
# Linked AGENT customers
# =============================================================================


def test_linked_agent_customer_reaches_own_project_across_orgs():
    agent = make_user(user_id="agent-1", account_type=AccountType.AGENT)
    # The agent belongs to their own brokerage, not the provider's org
    ctx = make_ctx(R.OWNER, org_id=OTHER_ORG_ID)
    project = make_project(customer_user_id="agent-1")

    assert authz.can_view_project(ctx, project, agent)
    assert authz.can_read_customer_chat(ctx, project, agent)
    assert authz.can_write_customer_chat(ctx, project, agent)
    assert authz.can_post_message(ctx, project, "customer", agent)

    assert not authz.can_edit_project(ctx, project, agent)
    assert not authz.can_upload_media(ctx, project, agent)
    assert not authz.can_read_team_chat(ctx, project, agent)
    assert not authz.can_post_message(ctx, project, "team", agent)


def test_linked_customer_needs_no_org_context():
    agent = make_user(user_id="agent-1", account_type=AccountType.AGENT)
    project = make_project(customer_user_id="agent-1")

    assert authz.can_view_project(None, project, agent)
    assert authz.can_post_message(None, project, MessageChannel.CUSTOMER, agent)


def test_non_agent_with_matching_customer_id_is_not_linked():
    provider = make_user(user_id="agent-1", account_type=AccountType.PROVIDER)
    project = make_project(customer_user_id="agent-1")

    assert not authz.can_view_project(make_ctx(R.NONE), project, provider)


def test_agent_not_linked_to_project_is_denied():
    agent = make_user(user_id="agent-2", account_type=AccountType.AGENT)
    project = make_project(customer_user_id="agent-1")

    assert not authz.can_view_project(make_ctx(R.NONE), project, agent)
    assert not authz.can_read_customer_chat(make_ctx(R.NONE), project, agent)


# =============================================================================
# Aggregates
# =============================================================================


def test_get_project_permissions_for_assigned_technician():
    ctx = make_ctx(R.TECHNICIAN)
    project = make_project(technician_id=USER_ID, project_manager_id=OTHER_USER_ID)

    perms = authz.get_project_permissions(ctx, project, make_user())

    assert perms.can_view_project
    assert not perms.can_edit_project
    assert not perms.can_reassign
    assert not perms.can_reschedule
    assert perms.can_upload_media
    assert perms.can_update_own_work
    assert perms.can_read_team_chat
    assert not perms.can_read_customer_chat
    assert perms.is_assigned_technician
    assert not perms.is_assigned_pm
    assert not perms.is_assigned_editor


def test_stale_owner_role_in_personal_org_is_denied_everything():
    ctx = make_ctx(R.OWNER, is_personal_org=True)
    project = make_project(project_manager_id=USER_ID)
    user = make_user()

    project_perms = authz.get_project_permissions(ctx, project, user).model_dump()
    org_perms = authz.get_org_permissions(ctx, user).model_dump()
    org_perms.pop("effective_role")

    assert not any(v for k, v in project_perms.items() if not k.startswith("is_assigned"))
    assert not any(org_perms.values())
    assert not authz.can_manage_project(ctx, project, user)
    for channel in MessageChannel:
        assert not authz.can_post_message(ctx, project, channel, user)
