# entries/constants.py

from django.db import models


class EntryStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


class AuditAction(models.TextChoices):
    CREATED = "CREATED", "Created"
    SUBMITTED = "SUBMITTED", "Submitted"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


# Verdicts accepted by the approval workflow
VERDICTS = (EntryStatus.APPROVED, EntryStatus.REJECTED)
