# trackvault/common/models.py
from __future__ import annotations

import uuid
from django.db import models

from trackvault.common.api.exceptions import ConflictError


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class VersionedModel(TimeStampedModel):
    """
    UUID primary key + optimistic `version` counter.
    Update services compare the client's version with the stored one, then bump it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        abstract = True

    def bump_version(self) -> None:
        self.version = (self.version or 0) + 1

    def check_version(self, expected: int | None) -> None:
        """
        Raise ConflictError when `expected` is given and differs from the
        stored version. Call on a row locked with select_for_update().
        """
        if expected is None or expected == self.version:
            return
        raise ConflictError(
            f"{type(self).__name__} was modified by another user: "
            f"expected version {expected}, current version is {self.version}."
        )
