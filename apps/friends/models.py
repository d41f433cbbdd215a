from django.db import models
import uuid


class FriendshipStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    BLOCKED = 'blocked', 'Blocked'


class Friendship(models.Model):
    """
    Directional relationship from ``user`` to ``friend``.

    A request is a single pending row; once accepted both directions exist
    as accepted rows.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='friendships')
    friend = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='friend_of')
    status = models.CharField(
        max_length=20,
        choices=FriendshipStatus.choices,
        default=FriendshipStatus.PENDING,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'friendships'
        constraints = [
            models.UniqueConstraint(fields=['user', 'friend'], name='friendships_user_friend_unique'),
            models.CheckConstraint(
                condition=models.Q(status__in=FriendshipStatus.values),
                name='friendships_status_check',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'status']),
            models.Index(fields=['friend', 'status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.username} -> {self.friend.username} ({self.status})"
