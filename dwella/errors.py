# dwella/errors.py
"""
Error taxonomy for the view engine.

Integrity errors mean the snapshot itself is broken and no view can be computed.
Contextual errors are expected control flow the caller recovers from.
"""


class DwellaError(Exception):
    """Base class for every error raised by the engine."""


class DanglingReferenceError(DwellaError):
    """A foreign key points at an entity that does not exist (or does not point back)."""

    def __init__(self, source_type, source_id, field, target_id):
        self.source_type = source_type
        self.source_id = source_id
        self.field = field
        self.target_id = target_id
        super().__init__(
            f"{source_type} {source_id!r} has dangling {field}={target_id!r}"
        )


class NoLandlordSelectedError(DwellaError):
    """A manager asked for a scoped view before choosing a landlord portfolio."""

    redirect_to = "/dashboard/select-landlord"

    def __init__(self, user_id=None):
        self.user_id = user_id
        super().__init__(f"manager {user_id!r} must select a landlord first")


class InvalidPageRequestError(DwellaError):
    def __init__(self, index, size):
        self.index = index
        self.size = size
        super().__init__(f"invalid page request: index={index!r}, size={size!r}")


class StaleMutationError(DwellaError):
    """Strict-mode mark-read against notification ids never received locally."""

    def __init__(self, api_ids):
        self.api_ids = tuple(sorted(api_ids))
        super().__init__(f"unknown notification ids: {', '.join(self.api_ids)}")


class DuplicateEntityError(DwellaError):
    def __init__(self, entity_type, entity_id):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id!r} already exists")


class InvalidTransitionError(DwellaError):
    pass


class OutsidePortfolioError(DwellaError):
    """A manager assignment reaches a property the landlord does not own."""

    def __init__(self, landlord_id, property_ids):
        self.landlord_id = landlord_id
        self.property_ids = tuple(sorted(property_ids))
        super().__init__(
            f"properties {list(self.property_ids)} are outside landlord {landlord_id!r}'s portfolio"
        )
