"""Domain semantic exceptions."""


class DomainError(Exception):
    """Base domain exception."""


class RegionNotFoundError(DomainError):
    """Raised when a region id is not in the catalog."""

    def __init__(self, region_id: int):
        self.region_id = region_id
        super().__init__(f"Unknown region id: {region_id}")


class WizardGuardError(DomainError):
    """Raised when the wizard is asked to leave a step whose inputs are incomplete."""
