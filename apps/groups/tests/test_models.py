import pytest

from apps.groups.models import GroupMember, GroupRole


@pytest.mark.django_db
class TestGroupModel:

    def test_admin_count(self, group_with_member, member_user):
        assert group_with_member.admin_count() == 1

        GroupMember.objects.filter(group=group_with_member, user=member_user).update(role=GroupRole.ADMIN)

        assert group_with_member.admin_count() == 2

    def test_user_role(self, group_with_member, user, member_user, other_user):
        assert group_with_member.get_user_role(user) == GroupRole.ADMIN
        assert group_with_member.get_user_role(member_user) == GroupRole.MEMBER
        assert group_with_member.get_user_role(other_user) is None
        assert not group_with_member.has_member(other_user)
